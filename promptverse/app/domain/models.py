# promptverse/app/domain/models.py
"""
Domain models for the prompt catalog repository.
The repository root is persisted as a single JSON blob, so every model
keeps the camelCase field names of the stored/exported document.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from promptverse.app.domain import defaults


class DisplayFormat(str, Enum):
    """Display format of a catalog item."""
    SQUARE = "square"
    # stored as "thumbnail" in exported data
    WIDESCREEN = "thumbnail"


class SocialPlatform(str, Enum):
    INSTAGRAM = "instagram"
    TELEGRAM = "telegram"
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    DISCORD = "discord"
    WEBSITE = "website"


class RecipeStep(BaseModel):
    """An intermediate image shown in an item's recipe."""
    id: str
    label: str
    type: Literal["image"] = "image"
    imageUrl: Optional[str] = None


class CatalogItem(BaseModel):
    """A single browsable prompt in the gallery."""
    id: str
    title: str
    description: str
    imageUrl: str
    categoryId: str
    tags: list[str] = Field(default_factory=list)
    createdAt: int  # epoch milliseconds
    format: Optional[DisplayFormat] = None
    recipe: Optional[list[RecipeStep]] = None

    @property
    def is_widescreen(self) -> bool:
        return self.format == DisplayFormat.WIDESCREEN


class Category(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None


class ContactMessage(BaseModel):
    id: str
    name: str
    message: str
    timestamp: int  # epoch milliseconds


class SocialLink(BaseModel):
    id: str
    platform: SocialPlatform
    url: str


class RepositoryRoot(BaseModel):
    """
    Aggregate of everything the application owns for one store.

    Admin credentials are kept as SHA-256 hashes only. The PIN failure
    counter and lockout expiry live outside this blob (see LockoutRecord).
    """
    prompts: list[CatalogItem] = Field(default_factory=lambda: defaults.initial_prompts())
    categories: list[Category] = Field(default_factory=lambda: defaults.default_categories())
    messages: list[ContactMessage] = Field(default_factory=list)
    analytics: list[int] = Field(default_factory=list)
    wishlist: list[str] = Field(default_factory=list)
    socialLinks: list[SocialLink] = Field(default_factory=list)
    adminUsername: str = defaults.DEFAULT_USER_HASH
    adminPassword: str = defaults.DEFAULT_PASS_HASH
    adminPin: str = defaults.DEFAULT_PIN_HASH

    def category_name(self, category_id: str) -> str:
        for category in self.categories:
            if category.id == category_id:
                return category.name
        return "Unknown"


class LockoutRecord(BaseModel):
    """Persisted PIN failure streak, stored under its own key."""
    failedAttempts: int = 0
    lockUntil: Optional[int] = None  # epoch milliseconds
