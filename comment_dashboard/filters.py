"""Filter Engine: apply a FilterSpec to the normalized comment collection.

Each predicate runs only when its FilterSpec field is set, and the active
predicates are intersected. Relative order of the input is preserved. Status
and age_range values outside the known sets disable that predicate rather than
matching nothing.
"""

from typing import Callable, Dict, List, Optional

from comment_dashboard.models.comment_models import (
    STATUS_ACTIVE,
    STATUS_RECENT,
    FilterSpec,
    NormalizedComment,
)

Predicate = Callable[[NormalizedComment], bool]

STATUS_PREDICATES: Dict[str, Predicate] = {
    "resolved": lambda c: c.resolved,
    "unresolved": lambda c: not c.resolved,
    STATUS_ACTIVE: lambda c: c.status_category == STATUS_ACTIVE,
    STATUS_RECENT: lambda c: c.status_category == STATUS_RECENT,
}

# Same overlapping thresholds as the summary age buckets
AGE_RANGE_PREDICATES: Dict[str, Predicate] = {
    "today": lambda c: c.age_days == 0,
    "week": lambda c: c.age_days < 7,
    "month": lambda c: c.age_days < 30,
    "older": lambda c: c.age_days >= 30,
}


def _search_predicate(query: Optional[str]) -> Optional[Predicate]:
    if not query or not query.strip():
        return None
    needle = query.strip().lower()

    def matches(comment: NormalizedComment) -> bool:
        return (
            needle in comment.message.lower()
            or needle in comment.author.name.lower()
            or bool(comment.location.display and needle in comment.location.display.lower())
        )

    return matches


def build_predicates(spec: FilterSpec) -> List[Predicate]:
    """Translate a FilterSpec into the ordered list of active predicates."""
    predicates: List[Predicate] = []

    if spec.status and spec.status in STATUS_PREDICATES:
        predicates.append(STATUS_PREDICATES[spec.status])

    if spec.author:
        author = spec.author
        predicates.append(lambda c: c.author.id == author)

    if spec.page:
        page = spec.page
        predicates.append(lambda c: c.location.page_id == page)

    if spec.node_type:
        node_type = spec.node_type
        predicates.append(lambda c: c.location.node_type == node_type)

    if spec.age_range and spec.age_range in AGE_RANGE_PREDICATES:
        predicates.append(AGE_RANGE_PREDICATES[spec.age_range])

    search = _search_predicate(spec.search)
    if search is not None:
        predicates.append(search)

    return predicates


def apply_filters(
    comments: List[NormalizedComment],
    spec: Optional[FilterSpec] = None,
) -> List[NormalizedComment]:
    """Return the comments matching every active predicate of ``spec``.

    Example:
        >>> apply_filters(comments, FilterSpec(status="unresolved", search="logo"))
    """
    if spec is None:
        return list(comments)

    predicates = build_predicates(spec)
    return [c for c in comments if all(p(c) for p in predicates)]
