"""
Decide to Run — Office Filtering.

Narrows the offices loaded for a state down to what the user asked to see:
by government level, by a free-text search over title and incumbent, then
sorted by filing deadline or title.
"""

from __future__ import annotations

from typing import Iterable

from decide_to_run.data.models import Office, OfficeFilters

LEVELS = ("all", "federal", "state", "local")
SORT_KEYS = ("deadline", "title")

# ISO dates sort lexically; offices without a deadline go last
_NO_DEADLINE = "9999-12-31"


def _matches_search(office: Office, term: str) -> bool:
    if term in office.title.lower():
        return True
    return office.incumbent is not None and term in office.incumbent.lower()


def filter_offices(offices: Iterable[Office], filters: OfficeFilters) -> list[Office]:
    """Apply level, search and sort filters. Returns a new list."""
    result = list(offices)

    if filters.level != "all":
        result = [o for o in result if o.level == filters.level]

    term = filters.search_term.strip().lower()
    if term:
        result = [o for o in result if _matches_search(o, term)]

    if filters.sort_by == "title":
        result.sort(key=lambda o: o.title.lower())
    else:
        result.sort(key=lambda o: o.filing_deadline or _NO_DEADLINE)
    return result
