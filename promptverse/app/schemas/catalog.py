# promptverse/app/schemas/catalog.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from promptverse.app.domain.models import (
    CatalogItem,
    Category,
    ContactMessage,
    DisplayFormat,
    RecipeStep,
    SocialLink,
    SocialPlatform,
)
from promptverse.services.notices import Notice


class NoticeOut(BaseModel):
    message: str
    level: Literal["success", "info", "error"] = "success"

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeOut":
        return cls(message=notice.message, level=notice.level)


class GalleryResponse(BaseModel):
    category: str
    query: str = ""
    count: int = 0
    items: list[CatalogItem] = Field(default_factory=list)


class CategoryList(BaseModel):
    categories: list[Category] = Field(default_factory=list)


class WishlistResponse(BaseModel):
    wishlist: list[str] = Field(default_factory=list)
    itemId: Optional[str] = None
    saved: Optional[bool] = None
    notices: list[NoticeOut] = Field(default_factory=list)


class VisitResponse(BaseModel):
    visits: int


class MediaResolveResponse(BaseModel):
    ref: str
    url: str


class MessageCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=120)
    message: Optional[str] = Field(default=None, max_length=2000)


class MessageResponse(BaseModel):
    message: ContactMessage


class ItemCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    image: Optional[str] = None
    categoryId: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    format: DisplayFormat = DisplayFormat.SQUARE
    recipe: list[RecipeStep] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value):
        # o formulário manda "tag1, tag2"
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class ItemResponse(BaseModel):
    item: CatalogItem
    categoryName: str
    notices: list[NoticeOut] = Field(default_factory=list)


class ManagedItemList(BaseModel):
    count: int = 0
    items: list[CatalogItem] = Field(default_factory=list)


class CategoryCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=80)
    icon: str = "Tag"


class CategoryResponse(BaseModel):
    category: Category
    notices: list[NoticeOut] = Field(default_factory=list)


class CategoryDeleteResponse(BaseModel):
    activeCategory: str
    notices: list[NoticeOut] = Field(default_factory=list)


class SocialLinkCreate(BaseModel):
    platform: SocialPlatform = SocialPlatform.INSTAGRAM
    url: Optional[str] = None


class SocialLinkResponse(BaseModel):
    link: SocialLink
    notices: list[NoticeOut] = Field(default_factory=list)


class SocialLinkList(BaseModel):
    links: list[SocialLink] = Field(default_factory=list)


class EnhanceRequest(BaseModel):
    idea: str = Field(..., min_length=1, max_length=1000)


class EnhanceResponse(BaseModel):
    description: str
