"""Product Contract — tests for the lifecycle rules over an in-memory ledger.

Tests cover:
    - Create then query: Manufactured status, created_at == updated_at, inputs kept
    - Create on existing id fails AlreadyExists and leaves the record unchanged
    - Create rejects empty and over-long ids, keeps surrounding whitespace verbatim
    - Create then read in the same transaction sees the new record
    - Update/Transfer/Query on absent id fail NotFound and write nothing
    - Update with identical inputs still advances updated_at
    - Transfer to the current owner still advances updated_at
    - created_at never changes after creation
    - GetAllProducts lists every created id once, in key order
    - Bootstrap twice: exactly p1, p2, reset with the second call's timestamp
    - Missing consensus time aborts before any write
"""

import pytest

from supplychain.core.errors import (
    InvalidProductIdError, ProductAlreadyExistsError, ProductNotFoundError,
    TimestampUnavailableError,
)
from supplychain.services.product_contract import ProductContract

T0 = "2023-11-14T22:13:20Z"
T1 = "2023-11-14T22:14:20Z"
T2 = "2023-11-14T22:15:20Z"

contract = ProductContract()


def _create_tablet(ctx):
    contract.create_product(
        ctx, "p3", "Tablet", "CompanyC", "An e-reader tablet", "Electronics",
    )


# ─── create_product ──────────────────────────────────────────────

def test_create_then_query_tablet(run):
    run(_create_tablet)
    product = run(lambda ctx: contract.query_product(ctx, "p3"), at=30)
    assert product.model_dump() == {
        "id": "p3",
        "name": "Tablet",
        "status": "Manufactured",
        "owner": "CompanyC",
        "created_at": T0,
        "updated_at": T0,
        "category": "Electronics",
        "description": "An e-reader tablet",
    }


def test_create_accepts_empty_strings(run):
    run(lambda ctx: contract.create_product(ctx, "p0", "", "", "", ""))
    product = run(lambda ctx: contract.query_product(ctx, "p0"))
    assert product.name == ""
    assert product.status == "Manufactured"


def test_create_existing_id_fails_and_keeps_record(run):
    run(_create_tablet)
    before = run(lambda ctx: contract.query_product(ctx, "p3"))
    with pytest.raises(ProductAlreadyExistsError) as exc:
        run(lambda ctx: contract.create_product(
            ctx, "p3", "Other", "CompanyZ", "dup", "Misc",
        ), at=60)
    assert exc.value.product_id == "p3"
    assert run(lambda ctx: contract.query_product(ctx, "p3")) == before


def test_create_rejects_empty_id(run, memory_ledger):
    with pytest.raises(InvalidProductIdError) as exc_info:
        run(lambda ctx: contract.create_product(ctx, "", "n", "o", "d", "c"))
    assert exc_info.value.http_status == 400
    assert memory_ledger.keys() == []


def test_create_rejects_over_long_id(run, memory_ledger):
    with pytest.raises(InvalidProductIdError):
        run(lambda ctx: contract.create_product(ctx, "x" * 256, "n", "o", "d", "c"))
    assert memory_ledger.keys() == []


def test_create_accepts_id_at_length_limit(run):
    run(lambda ctx: contract.create_product(ctx, "x" * 255, "n", "o", "d", "c"))
    assert run(lambda ctx: contract.product_exists(ctx, "x" * 255))


def test_create_keeps_id_verbatim(run):
    run(lambda ctx: contract.create_product(ctx, " p3 ", "n", "o", "d", "c"))
    assert run(lambda ctx: contract.product_exists(ctx, " p3 "))
    assert not run(lambda ctx: contract.product_exists(ctx, "p3"))


def test_create_then_query_in_one_transaction(run):
    def _create_and_read(ctx):
        _create_tablet(ctx)
        return contract.query_product(ctx, "p3")

    product = run(_create_and_read)
    assert product.name == "Tablet"
    assert product.created_at == T0


def test_create_without_consensus_time_writes_nothing(memory_ledger):
    with pytest.raises(TimestampUnavailableError):
        with memory_ledger.transaction("tx-no-clock", None) as ctx:
            _create_tablet(ctx)
    assert memory_ledger.keys() == []


# ─── update_product ──────────────────────────────────────────────

def test_update_overwrites_mutable_fields(run):
    run(_create_tablet)
    run(lambda ctx: contract.update_product(
        ctx, "p3", "Shipped", "CarrierX", "Boxed", "Devices",
    ), at=60)
    product = run(lambda ctx: contract.query_product(ctx, "p3"))
    assert product.status == "Shipped"
    assert product.owner == "CarrierX"
    assert product.description == "Boxed"
    assert product.category == "Devices"
    assert product.name == "Tablet"
    assert product.created_at == T0
    assert product.updated_at == T1


def test_update_with_identical_inputs_still_advances_updated_at(run):
    run(_create_tablet)
    run(lambda ctx: contract.update_product(
        ctx, "p3", "Manufactured", "CompanyC", "An e-reader tablet", "Electronics",
    ), at=60)
    product = run(lambda ctx: contract.query_product(ctx, "p3"))
    assert product.owner == "CompanyC"
    assert product.updated_at == T1
    assert product.created_at == T0


def test_update_accepts_any_status_label(run):
    run(_create_tablet)
    run(lambda ctx: contract.update_product(
        ctx, "p3", "lost at sea?", "CompanyC", "", "",
    ), at=60)
    assert run(lambda ctx: contract.query_product(ctx, "p3")).status == "lost at sea?"


def test_update_absent_id_fails_not_found(run, memory_ledger):
    with pytest.raises(ProductNotFoundError):
        run(lambda ctx: contract.update_product(ctx, "ghost", "S", "O", "D", "C"))
    assert memory_ledger.keys() == []


# ─── transfer_ownership ──────────────────────────────────────────

def test_transfer_changes_owner_and_timestamp_only(run):
    run(_create_tablet)
    run(lambda ctx: contract.transfer_ownership(ctx, "p3", "RetailerR"), at=60)
    product = run(lambda ctx: contract.query_product(ctx, "p3"))
    assert product.owner == "RetailerR"
    assert product.status == "Manufactured"
    assert product.description == "An e-reader tablet"
    assert product.created_at == T0
    assert product.updated_at == T1


def test_transfer_to_current_owner_still_advances_updated_at(run):
    run(_create_tablet)
    run(lambda ctx: contract.transfer_ownership(ctx, "p3", "CompanyC"), at=60)
    product = run(lambda ctx: contract.query_product(ctx, "p3"))
    assert product.owner == "CompanyC"
    assert product.updated_at == T1


def test_transfer_absent_id_fails_not_found(run):
    with pytest.raises(ProductNotFoundError):
        run(lambda ctx: contract.transfer_ownership(ctx, "ghost", "Anyone"))


def test_updated_at_is_non_decreasing_across_history(run):
    run(_create_tablet)
    run(lambda ctx: contract.transfer_ownership(ctx, "p3", "A"), at=60)
    run(lambda ctx: contract.update_product(ctx, "p3", "S", "B", "", ""), at=120)
    product = run(lambda ctx: contract.query_product(ctx, "p3"))
    assert product.created_at == T0
    assert product.updated_at == T2
    assert product.updated_at >= product.created_at


# ─── query / exists / list ───────────────────────────────────────

def test_query_absent_id_fails_not_found(run):
    with pytest.raises(ProductNotFoundError) as exc:
        run(lambda ctx: contract.query_product(ctx, "p404"))
    assert "p404" in exc.value.message


def test_product_exists(run):
    run(_create_tablet)
    assert run(lambda ctx: contract.product_exists(ctx, "p3")) is True
    assert run(lambda ctx: contract.product_exists(ctx, "p4")) is False


def test_get_all_products_empty_ledger(run):
    assert run(contract.get_all_products) == []


def test_get_all_products_key_order_each_once(run):
    for pid in ("p3", "a9", "p10"):
        run(lambda ctx, pid=pid: contract.create_product(ctx, pid, pid, "O", "", ""))
    run(contract.bootstrap, at=10)
    run(lambda ctx: contract.transfer_ownership(ctx, "p3", "X"), at=20)
    ids = [p.id for p in run(contract.get_all_products)]
    assert ids == ["a9", "p1", "p10", "p2", "p3"]


# ─── bootstrap ───────────────────────────────────────────────────

def test_bootstrap_seeds_two_products(run):
    run(contract.bootstrap)
    products = run(contract.get_all_products)
    assert [(p.id, p.name, p.owner) for p in products] == [
        ("p1", "Laptop", "CompanyA"),
        ("p2", "Smartphone", "CompanyB"),
    ]
    assert all(p.status == "Manufactured" for p in products)
    assert all(p.created_at == p.updated_at == T0 for p in products)


def test_bootstrap_twice_resets_seeds_without_error(run):
    run(contract.bootstrap)
    run(lambda ctx: contract.transfer_ownership(ctx, "p1", "Thief"), at=30)
    run(contract.bootstrap, at=60)
    products = run(contract.get_all_products)
    assert [p.id for p in products] == ["p1", "p2"]
    assert products[0].owner == "CompanyA"
    assert all(p.created_at == p.updated_at == T1 for p in products)


def test_create_after_bootstrap_rejects_seed_id(run):
    run(contract.bootstrap)
    with pytest.raises(ProductAlreadyExistsError):
        run(lambda ctx: contract.create_product(ctx, "p1", "X", "Y", "", ""))
