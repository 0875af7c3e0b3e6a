# promptverse/services/query.py
from __future__ import annotations

from typing import Iterable, Sequence

from promptverse.app.domain.defaults import CATEGORY_ALL, CATEGORY_FAVORITES, CATEGORY_THUMBNAIL
from promptverse.app.domain.models import CatalogItem


def split_terms(search_text: str | None) -> list[str]:
    """Separa a busca em termos minúsculos; só espaços equivale a busca vazia."""
    if not search_text:
        return []
    return search_text.lower().split()


def matches_term(item: CatalogItem, term: str) -> bool:
    if term in (item.title or "").lower():
        return True
    if term in (item.description or "").lower():
        return True
    if term in (item.categoryId or "").lower():
        return True
    return any(term in tag.lower() for tag in item.tags)


def filter_items(
    items: Sequence[CatalogItem],
    active_category: str,
    search_text: str | None,
    wishlist: Iterable[str],
) -> list[CatalogItem]:
    """
    Produce the gallery view for a category and a search string.

    Order of the checks matters: the square/widescreen partition runs first,
    for every category including "favorites", so the two formats never mix.
    Then the category (or wishlist) filter, then every search term must match
    the title, description, category id or any tag. Input order is preserved.
    """
    saved = set(wishlist)
    terms = split_terms(search_text)
    thumbnail_view = active_category == CATEGORY_THUMBNAIL

    results: list[CatalogItem] = []
    for item in items:
        if item.is_widescreen != thumbnail_view:
            continue

        if active_category == CATEGORY_FAVORITES:
            if item.id not in saved:
                continue
        elif active_category not in (CATEGORY_ALL, CATEGORY_THUMBNAIL):
            if item.categoryId != active_category:
                continue

        if terms and not all(matches_term(item, term) for term in terms):
            continue
        results.append(item)
    return results


def filter_managed(items: Sequence[CatalogItem], search_text: str | None) -> list[CatalogItem]:
    """Admin list: newest first, single term against title or tags."""
    term = (search_text or "").lower().strip()
    selected = [
        item
        for item in items
        if not term
        or term in item.title.lower()
        or any(term in tag.lower() for tag in item.tags)
    ]
    selected.reverse()
    return selected
