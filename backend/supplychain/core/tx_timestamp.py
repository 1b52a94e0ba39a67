"""Transaction Timestamp — deterministic operation time from consensus, not the local clock.

Invariants:
    - current_timestamp reads ONLY ctx.get_tx_timestamp(): every replica executing
      the same transaction computes the identical string
    - Output is RFC3339 in UTC with second precision, e.g. 2024-03-01T12:00:00Z
    - Nanoseconds are validated but truncated from the output
    - Missing or out-of-range timestamps raise TimestampUnavailableError

Design Decisions:
    - UTC "Z" suffix over host-local offset: replicas in different zones must
      still agree byte-for-byte on the stored value
    - Lexicographic order of the output matches chronological order for years
      0001–9999, so created_at/updated_at compare correctly as strings
"""

from datetime import datetime, timezone

from supplychain.core.domain_types import NANOS_PER_SECOND, TxTimestamp
from supplychain.core.errors import TimestampUnavailableError
from supplychain.core.repository_protocols import TransactionContext


def format_rfc3339(ts: TxTimestamp) -> str:
    """Render a (seconds, nanos) pair as an RFC3339 UTC string."""
    if not 0 <= ts.nanos < NANOS_PER_SECOND:
        raise TimestampUnavailableError(f"nanos out of range: {ts.nanos}")
    try:
        moment = datetime.fromtimestamp(ts.seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TimestampUnavailableError(
            f"seconds out of range: {ts.seconds}",
        ) from e
    return moment.replace(tzinfo=None).isoformat(timespec="seconds") + "Z"


def current_timestamp(ctx: TransactionContext) -> str:
    """Consensus time of the in-flight transaction as RFC3339."""
    ts = ctx.get_tx_timestamp()
    if ts is None:
        raise TimestampUnavailableError(
            "no timestamp in transaction context",
        )
    return format_rfc3339(ts)
