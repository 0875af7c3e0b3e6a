# promptverse/services/mutations.py
"""
Pure repository transitions: each function takes the current root and
returns a new one, leaving the input untouched. Persisting and notifying
is the caller's job (see CatalogService).
"""
from __future__ import annotations

from promptverse.app.domain.defaults import RESERVED_CATEGORY_IDS
from promptverse.app.domain.errors import DuplicateCategoryError, ReservedCategoryError
from promptverse.app.domain.models import (
    CatalogItem,
    Category,
    ContactMessage,
    RepositoryRoot,
    SocialLink,
)
from promptverse.services.ids import generate_id

MESSAGE_RETENTION_MS = 24 * 60 * 60 * 1000


def add_item(root: RepositoryRoot, item: CatalogItem) -> RepositoryRoot:
    if not item.id:
        item = item.model_copy(update={"id": generate_id()})
    return root.model_copy(update={"prompts": [*root.prompts, item]})


def delete_item(root: RepositoryRoot, item_id: str) -> RepositoryRoot:
    return root.model_copy(update={"prompts": [p for p in root.prompts if p.id != item_id]})


def add_category(root: RepositoryRoot, category: Category) -> RepositoryRoot:
    if any(existing.id == category.id for existing in root.categories):
        raise DuplicateCategoryError(category.id)
    return root.model_copy(update={"categories": [*root.categories, category]})


def delete_category(root: RepositoryRoot, category_id: str) -> RepositoryRoot:
    if category_id in RESERVED_CATEGORY_IDS:
        raise ReservedCategoryError(category_id)
    return root.model_copy(
        update={"categories": [c for c in root.categories if c.id != category_id]}
    )


def toggle_wishlist(root: RepositoryRoot, item_id: str) -> tuple[RepositoryRoot, bool]:
    """Returns the new root and True when the id was added."""
    if item_id in root.wishlist:
        wishlist = [wid for wid in root.wishlist if wid != item_id]
        return root.model_copy(update={"wishlist": wishlist}), False
    return root.model_copy(update={"wishlist": [*root.wishlist, item_id]}), True


def add_social_link(root: RepositoryRoot, link: SocialLink) -> RepositoryRoot:
    if not link.id:
        link = link.model_copy(update={"id": generate_id()})
    return root.model_copy(update={"socialLinks": [*root.socialLinks, link]})


def delete_social_link(root: RepositoryRoot, link_id: str) -> RepositoryRoot:
    return root.model_copy(
        update={"socialLinks": [link for link in root.socialLinks if link.id != link_id]}
    )


def add_message(root: RepositoryRoot, message: ContactMessage) -> RepositoryRoot:
    # newest first
    return root.model_copy(update={"messages": [message, *root.messages]})


def clear_messages(root: RepositoryRoot) -> RepositoryRoot:
    return root.model_copy(update={"messages": []})


def delete_message(root: RepositoryRoot, message_id: str) -> RepositoryRoot:
    return root.model_copy(update={"messages": [m for m in root.messages if m.id != message_id]})


def sweep_messages(
    root: RepositoryRoot, now_ms: int, retention_ms: int = MESSAGE_RETENTION_MS
) -> RepositoryRoot:
    """Drop messages older than the retention window. Returns `root` itself when nothing expired."""
    recent = [m for m in root.messages if now_ms - m.timestamp < retention_ms]
    if len(recent) == len(root.messages):
        return root
    return root.model_copy(update={"messages": recent})


def track_visit(root: RepositoryRoot, now_ms: int) -> RepositoryRoot:
    return root.model_copy(update={"analytics": [*root.analytics, now_ms]})


def update_pin_hash(root: RepositoryRoot, pin_hash: str) -> RepositoryRoot:
    return root.model_copy(update={"adminPin": pin_hash})


def update_credential_hashes(
    root: RepositoryRoot, username_hash: str, password_hash: str
) -> RepositoryRoot:
    return root.model_copy(
        update={"adminUsername": username_hash, "adminPassword": password_hash}
    )
