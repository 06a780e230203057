"""Entity resolution — turn a typed name or ID into exactly one entity.

Pure, read-only matching over a candidate sequence that the caller has
already fetched.  Matching rules, in order:

1. **Exact ID** (case-sensitive) short-circuits to :class:`UniqueMatch`,
   even when the same string is also a substring of another name.
2. **Case-insensitive substring** of the display name.
3. Zero hits → :class:`NoMatch`; one → :class:`UniqueMatch`; more →
   :class:`AmbiguousMatch` listing every hit in candidate order.

Substring (not fuzzy) matching keeps the ambiguity message actionable.
"""

from __future__ import annotations

from collections.abc import Sequence

from surepet_cli.core.models import (
    AmbiguousMatch,
    EntityT,
    NoMatch,
    ResolutionResult,
    UniqueMatch,
)
from surepet_cli.exceptions import AmbiguousError, NotFoundError


def resolve(query: str, candidates: Sequence[EntityT]) -> ResolutionResult[EntityT]:
    """Match *query* against *candidates* by ID, then by name substring."""
    for candidate in candidates:
        if candidate.id == query:
            return UniqueMatch(candidate)

    needle = query.casefold()
    hits = tuple(c for c in candidates if needle in c.name.casefold())

    if not hits:
        return NoMatch(query)
    if len(hits) == 1:
        return UniqueMatch(hits[0])
    return AmbiguousMatch(query, hits)


def require_unique(
    query: str,
    candidates: Sequence[EntityT],
    *,
    entity: str,
) -> EntityT:
    """Resolve *query* or raise the matching domain error.

    Raises
    ------
    NotFoundError
        When nothing matches.
    AmbiguousError
        When several candidates match; the error lists all of them.
    """
    result = resolve(query, candidates)
    if isinstance(result, UniqueMatch):
        return result.entity
    if isinstance(result, AmbiguousMatch):
        raise AmbiguousError(
            query,
            [(c.id, c.name) for c in result.candidates],
            entity=entity,
        )
    raise NotFoundError(query, entity=entity)
