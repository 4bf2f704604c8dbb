from .exceptions import NoFocusAreasConfigured
from .models import Issue

ACTIONABLE_ISSUE_STATUSES = (Issue.Status.PENDING, Issue.Status.IN_PROGRESS)


def eligible(focus_areas, category) -> bool:
    return bool(category) and category in set(focus_areas or ())


def category_batches(categories, batch_size):
    """Split categories into chunks the store accepts in one ``in`` filter."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    unique = list(dict.fromkeys(categories))
    return [unique[start:start + batch_size] for start in range(0, len(unique), batch_size)]


def visible_issues(store, focus_areas, *, statuses=ACTIONABLE_ISSUE_STATUSES, batch_size=30, limit=50):
    """Issues a reviewer with ``focus_areas`` may act on, newest first.

    An empty capability set raises :class:`NoFocusAreasConfigured` so callers
    can tell "nothing configured" apart from "nothing reported".
    """
    categories = [area for area in (focus_areas or ()) if area]
    if not categories:
        raise NoFocusAreasConfigured()

    found = {}
    for batch in category_batches(categories, batch_size):
        issues = store.query(
            "issues",
            filters=[("category", "in", batch), ("status", "in", list(statuses))],
            order="-timestamp",
            limit=limit,
        )
        for issue in issues:
            found[issue.pk] = issue

    merged = sorted(found.values(), key=lambda issue: (issue.timestamp, issue.pk), reverse=True)
    return merged[:limit]
