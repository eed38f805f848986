"""Ordering engine: sort columns, click handling and stable sorting."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key

from procmon.models import ProcessRecord


class SortColumn(Enum):
    """Sortable columns of the process table."""

    PID = "pid"
    NAME = "name"
    MEMORY = "memory"
    CPU = "cpu"


# Position of each column's value in ProcessRecord.sort_key
_KEY_INDEX = {
    SortColumn.PID: 0,
    SortColumn.NAME: 1,
    SortColumn.MEMORY: 2,
    SortColumn.CPU: 3,
}


@dataclass(slots=True, frozen=True)
class OrderingState:
    """Current sort column and direction."""

    column: SortColumn
    ascending: bool = False

    @property
    def label(self) -> str:
        return f"{self.column.value} ({'asc' if self.ascending else 'desc'})"


DEFAULT_ORDERING = OrderingState(SortColumn.MEMORY, ascending=False)


def next_ordering(state: OrderingState, clicked: SortColumn) -> OrderingState:
    """
    Apply a column click to an ordering state.

    Clicking the current column toggles the direction; clicking another
    column selects it in descending order.
    """
    if clicked == state.column:
        return OrderingState(state.column, not state.ascending)
    return OrderingState(clicked, ascending=False)


def _compare(left: ProcessRecord, right: ProcessRecord, index: int) -> int:
    try:
        a = left.sort_key[index]
        b = right.sort_key[index]
        return (a > b) - (a < b)
    except (TypeError, IndexError):
        # Malformed key: treat the pair as equal
        return 0


def sort_records(
    records: Iterable[ProcessRecord],
    column: SortColumn,
    ascending: bool,
) -> list[ProcessRecord]:
    """
    Return ``records`` ordered by ``column``.

    The sort is stable in both directions: descending negates the comparison
    instead of reversing the result, so records that compare equal keep
    their input order whether sorting ascending or descending.
    """
    index = _KEY_INDEX[column]
    sign = 1 if ascending else -1
    return sorted(records, key=cmp_to_key(lambda a, b: sign * _compare(a, b, index)))
