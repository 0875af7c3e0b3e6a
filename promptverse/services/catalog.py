# promptverse/services/catalog.py
"""
Catalog service: the single owner of the in-memory repository.

Every mutation applies a pure transition from `mutations`, persists the full
repository and publishes a notice. Validation failures raise before anything
changes, so a rejected operation never leaves partial state behind.
"""
from __future__ import annotations

import functools
import logging
import re
import threading
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from promptverse.app.domain.defaults import CATEGORY_ALL
from promptverse.app.domain.errors import InvalidPinFormatError, MissingFieldError
from promptverse.app.domain.models import (
    CatalogItem,
    Category,
    ContactMessage,
    DisplayFormat,
    RecipeStep,
    RepositoryRoot,
    SocialLink,
    SocialPlatform,
)
from promptverse.services import mutations
from promptverse.services.clock import Clock, now_ms
from promptverse.services.ids import category_id_from_name, generate_id
from promptverse.services.media import resolve_image_url
from promptverse.services.notices import NoticeBoard
from promptverse.services.persistence import PersistenceGateway, export_filename
from promptverse.services.query import filter_items, filter_managed
from promptverse.services.security import hash_value

logger = logging.getLogger(__name__)

_PIN_RE = re.compile(r"[0-9]{4}")
DEFAULT_MEDIA_BASE_URL = "https://res.cloudinary.com/promptverse/image/upload"


def _required(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise MissingFieldError(field)
    return text


def _serialized(method):
    """Run a read-modify-write of the root while holding the service lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class CatalogService:
    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        clock: Clock = now_ms,
        notices: Optional[NoticeBoard] = None,
        media_base_url: str = DEFAULT_MEDIA_BASE_URL,
        retention_hours: int = 24,
    ) -> None:
        self._gateway = gateway
        self._clock = clock
        self.notices = notices or NoticeBoard()
        self.media_base_url = media_base_url
        self.retention_ms = retention_hours * 60 * 60 * 1000
        self._lock = threading.RLock()
        self.root: RepositoryRoot = gateway.load()
        self.sweep_messages()

    def _commit(self, root: RepositoryRoot, message: Optional[str] = None, level: str = "success") -> None:
        self.root = root
        self._gateway.save(root)
        if message:
            self.notices.publish(message, level)  # type: ignore[arg-type]

    # ----- queries -----

    def gallery(self, category: str = CATEGORY_ALL, search: Optional[str] = None) -> list[CatalogItem]:
        return filter_items(self.root.prompts, category or CATEGORY_ALL, search, self.root.wishlist)

    def managed_items(self, search: Optional[str] = None) -> list[CatalogItem]:
        return filter_managed(self.root.prompts, search)

    def resolve_image(self, ref: str) -> str:
        return resolve_image_url((ref or "").strip(), self.media_base_url)

    def pin_hash(self) -> str:
        return self.root.adminPin

    def credential_hashes(self) -> tuple[str, str]:
        return self.root.adminUsername, self.root.adminPassword

    # ----- items -----

    @_serialized
    def submit_item(
        self,
        *,
        title: Optional[str],
        description: Optional[str],
        image: Optional[str],
        category_id: Optional[str],
        tags: Iterable[str] = (),
        display_format: DisplayFormat = DisplayFormat.SQUARE,
        recipe: Iterable[RecipeStep] = (),
    ) -> CatalogItem:
        """Validate admin form input and add it as a new item."""
        item = CatalogItem(
            id=generate_id(),
            title=_required(title, "Title"),
            description=_required(description, "Description"),
            imageUrl=self.resolve_image(_required(image, "Image Source")),
            categoryId=_required(category_id, "Category"),
            tags=[tag.strip() for tag in tags if tag and tag.strip()],
            createdAt=self._clock(),
            format=display_format,
            recipe=[
                step.model_copy(update={"imageUrl": self.resolve_image(step.imageUrl or "") or None})
                for step in recipe
            ],
        )
        return self.add_item(item)

    @_serialized
    def add_item(self, item: CatalogItem) -> CatalogItem:
        root = mutations.add_item(self.root, item)
        added = root.prompts[-1]
        self._commit(root, "Prompt saved to Library!")
        logger.info("catalog.item_added id=%s category=%s", added.id, added.categoryId)
        return added

    @_serialized
    def delete_item(self, item_id: str) -> None:
        self._commit(mutations.delete_item(self.root, item_id), "Prompt deleted successfully", "info")
        logger.info("catalog.item_deleted id=%s", item_id)

    # ----- categories -----

    @_serialized
    def add_category(self, name: Optional[str], icon: str = "Tag") -> Category:
        display_name = _required(name, "Category Name")
        category = Category(id=category_id_from_name(display_name), name=display_name, icon=icon)
        self._commit(mutations.add_category(self.root, category), "New Category added!")
        logger.info("catalog.category_added id=%s", category.id)
        return category

    @_serialized
    def delete_category(self, category_id: str, active_category: str = CATEGORY_ALL) -> str:
        """Remove a category; returns the filter the caller should show next."""
        self._commit(mutations.delete_category(self.root, category_id), "Category removed.", "info")
        logger.info("catalog.category_deleted id=%s", category_id)
        return CATEGORY_ALL if active_category == category_id else active_category

    # ----- wishlist -----

    @_serialized
    def toggle_wishlist(self, item_id: str) -> bool:
        root, added = mutations.toggle_wishlist(self.root, item_id)
        self._commit(root, "Added to Collection" if added else None)
        return added

    # ----- social links -----

    @_serialized
    def add_social_link(self, platform: SocialPlatform | str, url: Optional[str]) -> SocialLink:
        link = SocialLink(id=generate_id(), platform=SocialPlatform(platform), url=_required(url, "URL"))
        self._commit(mutations.add_social_link(self.root, link), "Social link added!")
        return link

    @_serialized
    def delete_social_link(self, link_id: str) -> None:
        self._commit(mutations.delete_social_link(self.root, link_id), "Social link removed.", "info")

    # ----- messages -----

    @_serialized
    def add_message(self, name: Optional[str], message: Optional[str]) -> ContactMessage:
        contact = ContactMessage(
            id=generate_id(),
            name=_required(name, "Name"),
            message=_required(message, "Message"),
            timestamp=self._clock(),
        )
        self._commit(mutations.add_message(self.root, contact))
        logger.info("catalog.message_received id=%s", contact.id)
        return contact

    @_serialized
    def clear_messages(self) -> None:
        self._commit(mutations.clear_messages(self.root), "Inbox cleared.")

    @_serialized
    def delete_message(self, message_id: str) -> None:
        self._commit(mutations.delete_message(self.root, message_id))

    @_serialized
    def sweep_messages(self) -> int:
        """Retention pass; idempotent. Returns how many messages expired."""
        root = mutations.sweep_messages(self.root, self._clock(), self.retention_ms)
        if root is self.root:
            return 0
        removed = len(self.root.messages) - len(root.messages)
        self._commit(root)
        logger.info("catalog.messages_expired count=%d", removed)
        return removed

    # ----- analytics -----

    @_serialized
    def track_visit(self) -> int:
        self._commit(mutations.track_visit(self.root, self._clock()))
        return len(self.root.analytics)

    # ----- credentials -----

    @_serialized
    def update_pin(self, new_pin: Optional[str]) -> None:
        if not new_pin or not _PIN_RE.fullmatch(new_pin):
            raise InvalidPinFormatError()
        self._commit(mutations.update_pin_hash(self.root, hash_value(new_pin)), "Security PIN updated!")
        logger.info("catalog.pin_updated")

    @_serialized
    def update_credentials(self, username: Optional[str], password: Optional[str]) -> None:
        user = _required(username, "Username")
        secret = _required(password, "Password")
        root = mutations.update_credential_hashes(self.root, hash_value(user), hash_value(secret))
        self._commit(root, "Credentials updated!")
        logger.info("catalog.credentials_updated")

    # ----- backup -----

    def export_backup(self, day: Optional[date] = None) -> tuple[str, str]:
        filename = export_filename(day)
        payload = self._gateway.export_payload(self.root)
        self.notices.publish("Backup file downloaded!")
        return filename, payload

    def export_to_file(self, directory: str | Path, day: Optional[date] = None) -> Path:
        path = self._gateway.export_to_file(self.root, directory, day)
        self.notices.publish("Backup file downloaded!")
        return path

    @_serialized
    def import_backup(self, contents: str | bytes) -> RepositoryRoot:
        imported = self._gateway.import_from_file(contents)
        self._commit(imported, "Data imported successfully!")
        logger.info("catalog.imported prompts=%d", len(imported.prompts))
        return imported
