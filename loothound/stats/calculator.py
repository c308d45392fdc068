"""Derived statistics over a profile's snapshot history."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

COMPARISON_CAPTION = "Compared to previous snapshot"

# Placeholder income rate shown until income tracking exists
INCOME_PER_HOUR = 420.0


class Trend(Enum):
    """Direction indicator shown next to a stat."""
    UP = "up"
    DOWN = "down"
    NONE = "none"


@dataclass(frozen=True)
class StatCard:
    """One tile of the stats grid."""
    title: str
    icon: str
    value: str
    diff: Optional[int] = None

    @property
    def trend(self) -> Trend:
        return classify_trend(self.diff)

    @property
    def caption(self) -> Optional[str]:
        return COMPARISON_CAPTION if self.diff else None


def _field(snapshot: Any, name: str) -> Any:
    if isinstance(snapshot, Mapping):
        return snapshot.get(name)
    return getattr(snapshot, name, None)


def newest_first(snapshots: Sequence[Any]) -> list[Any]:
    """
    Order snapshots newest first.

    Snapshots without ``created_at`` cannot be ordered; the input order is
    then taken as already newest first.
    """
    timestamps = [_field(snapshot, "created_at") for snapshot in snapshots]
    if any(ts is None for ts in timestamps):
        return list(snapshots)
    return sorted(snapshots, key=lambda snapshot: _field(snapshot, "created_at"), reverse=True)


def compare_snapshots(snapshots: Optional[Sequence[Any]]) -> int:
    """
    Comparison metric between the two most recent snapshots.

    Zero snapshots give 0, one snapshot gives its pricing revision, and two
    or more give the sum of the two newest pricing revisions.
    """
    if not snapshots:
        return 0

    ordered = newest_first(snapshots)
    if len(ordered) == 1:
        return _field(ordered[0], "pricing_revision")

    return _field(ordered[0], "pricing_revision") + _field(ordered[1], "pricing_revision")


def classify_trend(diff: Optional[float]) -> Trend:
    """Classify a diff by sign; no diff means no indicator."""
    if not diff:
        return Trend.NONE
    return Trend.UP if diff > 0 else Trend.DOWN


def format_amount(value: float) -> str:
    return f"{value:,.2f}"


def build_stats(total: float, snapshots: Optional[Sequence[Any]]) -> list[StatCard]:
    """Assemble the net worth, income and snapshot count tiles."""
    return [
        StatCard(
            title="Net Worth",
            icon="netWorth",
            value=f"{format_amount(total)} div",
            diff=compare_snapshots(snapshots),
        ),
        StatCard(
            title="Income",
            icon="income",
            value=f"{format_amount(INCOME_PER_HOUR)}/h",
            diff=0,
        ),
        StatCard(
            title="Snapshot Count",
            icon="snapshot",
            value=str(len(snapshots)) if snapshots else "0",
        ),
    ]
