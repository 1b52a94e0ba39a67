"""Product Store — tests for the record store accessor over a fake context.

Tests cover:
    - exists/get/put keyed by product id
    - put then get round-trips field-equal
    - get on absent id raises ProductNotFoundError; empty value counts as absent
    - range_scan yields key order, honours [start, end) bounds
    - range_scan closes the cursor on exhaustion, early stop, and decode error
    - StorageReadError from the backend propagates unchanged
"""

import pytest

from supplychain.core.errors import (
    ProductDecodeError, ProductNotFoundError, StorageReadError,
)
from supplychain.core.product import Product, encode_product
from supplychain.core.product_store import ProductStore


class _TrackingCursor:
    def __init__(self, items, fail_after=None):
        self._items = items
        self._fail_after = fail_after
        self.closed = False

    def __iter__(self):
        for i, item in enumerate(self._items):
            if self._fail_after is not None and i == self._fail_after:
                raise StorageReadError("backend went away")
            yield item

    def close(self):
        self.closed = True


class _FakeContext:
    """Unbuffered TransactionContext: writes visible immediately."""
    tx_id = "tx-fake"

    def __init__(self, state=None, fail_scan_after=None):
        self.state = dict(state or {})
        self.cursors: list[_TrackingCursor] = []
        self._fail_scan_after = fail_scan_after

    def get_state(self, key):
        return self.state.get(key)

    def put_state(self, key, value):
        self.state[key] = value

    def get_state_by_range(self, start, end):
        keys = sorted(k for k in self.state if k >= start and (not end or k < end))
        cursor = _TrackingCursor(
            [(k, self.state[k]) for k in keys], self._fail_scan_after,
        )
        self.cursors.append(cursor)
        return cursor

    def get_tx_timestamp(self):
        return None


def _product(pid: str, owner: str = "CompanyA") -> Product:
    return Product(
        id=pid, name=f"Item {pid}", status="Manufactured", owner=owner,
        created_at="2023-11-14T22:13:20Z", updated_at="2023-11-14T22:13:20Z",
        category="Electronics", description="",
    )


def test_put_then_get_round_trips():
    ctx = _FakeContext()
    store = ProductStore(ctx)
    product = _product("p9")
    store.put(product)
    assert store.get("p9") == product


def test_put_writes_under_product_id():
    ctx = _FakeContext()
    ProductStore(ctx).put(_product("p9"))
    assert ctx.state["p9"] == encode_product(_product("p9"))


def test_put_overwrites_unconditionally():
    ctx = _FakeContext()
    store = ProductStore(ctx)
    store.put(_product("p9", owner="A"))
    store.put(_product("p9", owner="B"))
    assert store.get("p9").owner == "B"


def test_exists_reflects_stored_value():
    ctx = _FakeContext({"p1": encode_product(_product("p1"))})
    store = ProductStore(ctx)
    assert store.exists("p1") is True
    assert store.exists("p2") is False


def test_empty_value_counts_as_absent():
    ctx = _FakeContext({"p1": b""})
    store = ProductStore(ctx)
    assert store.exists("p1") is False
    with pytest.raises(ProductNotFoundError):
        store.get("p1")


def test_get_absent_raises_not_found():
    with pytest.raises(ProductNotFoundError) as exc:
        ProductStore(_FakeContext()).get("nope")
    assert exc.value.product_id == "nope"
    assert exc.value.http_status == 404


def test_get_corrupt_value_raises_decode_error():
    ctx = _FakeContext({"p1": b"\xff\xfe"})
    with pytest.raises(ProductDecodeError):
        ProductStore(ctx).get("p1")


def test_range_scan_full_is_key_ordered():
    ctx = _FakeContext({
        pid: encode_product(_product(pid)) for pid in ("p2", "p10", "a1", "p1")
    })
    ids = [p.id for p in ProductStore(ctx).range_scan()]
    assert ids == ["a1", "p1", "p10", "p2"]
    assert ctx.cursors[0].closed


def test_range_scan_bounds_are_half_open():
    ctx = _FakeContext({
        pid: encode_product(_product(pid)) for pid in ("p1", "p2", "p3", "p4")
    })
    ids = [p.id for p in ProductStore(ctx).range_scan("p2", "p4")]
    assert ids == ["p2", "p3"]


def test_range_scan_is_lazy():
    ctx = _FakeContext({"p1": encode_product(_product("p1"))})
    scan = ProductStore(ctx).range_scan()
    assert ctx.cursors == []
    next(scan)
    assert len(ctx.cursors) == 1


def test_range_scan_closes_cursor_on_early_stop():
    ctx = _FakeContext({
        pid: encode_product(_product(pid)) for pid in ("p1", "p2", "p3")
    })
    scan = ProductStore(ctx).range_scan()
    assert next(scan).id == "p1"
    scan.close()
    assert ctx.cursors[0].closed


def test_range_scan_closes_cursor_on_decode_error():
    ctx = _FakeContext({
        "p1": encode_product(_product("p1")),
        "p2": b"garbage",
    })
    with pytest.raises(ProductDecodeError):
        list(ProductStore(ctx).range_scan())
    assert ctx.cursors[0].closed


def test_range_scan_closes_cursor_on_read_error():
    ctx = _FakeContext(
        {pid: encode_product(_product(pid)) for pid in ("p1", "p2")},
        fail_scan_after=1,
    )
    with pytest.raises(StorageReadError):
        list(ProductStore(ctx).range_scan())
    assert ctx.cursors[0].closed


def test_range_scan_empty_store():
    ctx = _FakeContext()
    assert list(ProductStore(ctx).range_scan()) == []
    assert ctx.cursors[0].closed
