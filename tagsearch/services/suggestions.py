"""Ranked tag suggestions for free-text input."""

from __future__ import annotations

from typing import Sequence

from tagsearch.domain.models import Tag
from tagsearch.utils.text import normalize_text

DEFAULT_SUGGESTION_LIMIT = 10

_EXACT, _PREFIX, _SUBSTRING = 0, 1, 2


def generate_suggestions(
    query: str,
    all_tags: Sequence[Tag],
    selected_tags: Sequence[Tag],
    *,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[Tag]:
    """Return tags matching ``query``, best matches first.

    Exact matches rank above prefix matches, which rank above substring
    matches. Ties keep the order of ``all_tags``. Already selected tags are
    never suggested.
    """

    needle = normalize_text(query)
    if not needle or limit <= 0:
        return []

    excluded = {tag.id for tag in selected_tags}
    tiers: tuple[list[Tag], list[Tag], list[Tag]] = ([], [], [])
    for tag in all_tags:
        if tag.id in excluded:
            continue
        name = normalize_text(tag.display_name)
        if name == needle:
            tiers[_EXACT].append(tag)
        elif name.startswith(needle):
            tiers[_PREFIX].append(tag)
        elif needle in name:
            tiers[_SUBSTRING].append(tag)
        else:
            continue
        # One entry per id, first occurrence wins.
        excluded.add(tag.id)

    ranked = [*tiers[_EXACT], *tiers[_PREFIX], *tiers[_SUBSTRING]]
    return ranked[:limit]


def find_exact_match(text: str, all_tags: Sequence[Tag]) -> Tag | None:
    """Return the first tag whose normalized name equals normalized ``text``."""

    needle = normalize_text(text)
    if not needle:
        return None
    for tag in all_tags:
        if normalize_text(tag.display_name) == needle:
            return tag
    return None


class TagSuggestionService:
    def __init__(self, limit: int = DEFAULT_SUGGESTION_LIMIT) -> None:
        self.limit = limit

    def generate_suggestions(
        self,
        query: str,
        all_tags: Sequence[Tag],
        selected_tags: Sequence[Tag],
    ) -> list[Tag]:
        return generate_suggestions(query, all_tags, selected_tags, limit=self.limit)

    def find_exact_match(self, text: str, all_tags: Sequence[Tag]) -> Tag | None:
        return find_exact_match(text, all_tags)


__all__ = [
    "DEFAULT_SUGGESTION_LIMIT",
    "TagSuggestionService",
    "find_exact_match",
    "generate_suggestions",
]
