# promptverse/app/routers/gallery.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from promptverse.app.context import AppContext
from promptverse.app.deps import get_context
from promptverse.app.domain.errors import CatalogValidationError
from promptverse.app.schemas.catalog import (
    CategoryList,
    GalleryResponse,
    MediaResolveResponse,
    MessageCreate,
    MessageResponse,
    NoticeOut,
    SocialLinkList,
    VisitResponse,
    WishlistResponse,
)

router = APIRouter(tags=["gallery"])


@router.get("/gallery", response_model=GalleryResponse)
async def get_gallery(
    category: str = Query(default="all"),
    q: str = Query(default="", max_length=200),
    ctx: AppContext = Depends(get_context),
) -> GalleryResponse:
    items = ctx.catalog.gallery(category, q)
    return GalleryResponse(category=category, query=q, count=len(items), items=items)


@router.get("/categories", response_model=CategoryList)
async def list_categories(ctx: AppContext = Depends(get_context)) -> CategoryList:
    return CategoryList(categories=ctx.catalog.root.categories)


@router.get("/social-links", response_model=SocialLinkList)
async def list_social_links(ctx: AppContext = Depends(get_context)) -> SocialLinkList:
    return SocialLinkList(links=ctx.catalog.root.socialLinks)


@router.get("/wishlist", response_model=WishlistResponse)
async def get_wishlist(ctx: AppContext = Depends(get_context)) -> WishlistResponse:
    return WishlistResponse(wishlist=ctx.catalog.root.wishlist)


@router.post("/wishlist/{item_id}", response_model=WishlistResponse)
async def toggle_wishlist(item_id: str, ctx: AppContext = Depends(get_context)) -> WishlistResponse:
    saved = ctx.catalog.toggle_wishlist(item_id)
    return WishlistResponse(
        wishlist=ctx.catalog.root.wishlist,
        itemId=item_id,
        saved=saved,
        notices=[NoticeOut.from_notice(n) for n in ctx.catalog.notices.drain()],
    )


@router.post("/visits", response_model=VisitResponse, status_code=status.HTTP_201_CREATED)
async def track_visit(ctx: AppContext = Depends(get_context)) -> VisitResponse:
    return VisitResponse(visits=ctx.catalog.track_visit())


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate, ctx: AppContext = Depends(get_context)
) -> MessageResponse:
    try:
        message = ctx.catalog.add_message(payload.name, payload.message)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return MessageResponse(message=message)


@router.get("/media/resolve", response_model=MediaResolveResponse)
async def resolve_media(
    ref: str = Query(..., min_length=1), ctx: AppContext = Depends(get_context)
) -> MediaResolveResponse:
    return MediaResolveResponse(ref=ref, url=ctx.catalog.resolve_image(ref))
