# promptverse/app/routers/admin.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from starlette.concurrency import run_in_threadpool

from promptverse.app.context import AdminSession, AppContext
from promptverse.app.deps import get_admin_session, get_context, require_admin
from promptverse.app.domain.errors import (
    AuthenticationError,
    CatalogValidationError,
    ImportFormatError,
    PinLockedError,
)
from promptverse.app.schemas.admin import (
    ActionResponse,
    AnalyticsSummary,
    CredentialsUpdate,
    InboxResponse,
    LoginRequest,
    LoginResponse,
    PinDigitRequest,
    PinStatus,
    PinUpdate,
)
from promptverse.app.schemas.catalog import (
    CategoryCreate,
    CategoryDeleteResponse,
    CategoryResponse,
    EnhanceRequest,
    EnhanceResponse,
    ItemCreate,
    ItemResponse,
    ManagedItemList,
    NoticeOut,
    SocialLinkCreate,
    SocialLinkResponse,
)
from promptverse.services.enhance import enhance_prompt
from promptverse.services.errors import EnhancementError, IdentityProviderError
from promptverse.services.identity import Credentials
from promptverse.services.pin_guard import PinGuard

router = APIRouter(prefix="/admin", tags=["admin"])

DAY_MS = 24 * 60 * 60 * 1000


def _notices(ctx: AppContext) -> list[NoticeOut]:
    return [NoticeOut.from_notice(n) for n in ctx.catalog.notices.drain()]


def _pin_status(guard: PinGuard) -> PinStatus:
    state = guard.tick()
    return PinStatus(
        state=state,
        digitsEntered=guard.digits_entered,
        secondsRemaining=guard.seconds_remaining(),
        verified=guard.verified,
    )


def _locked(exc: PinLockedError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_423_LOCKED,
        detail={"message": str(exc), "secondsRemaining": exc.seconds_remaining},
    )


# ----- identity -----

@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, ctx: AppContext = Depends(get_context)) -> LoginResponse:
    credentials = Credentials(
        username=payload.username,
        password=payload.password,
        access_token=payload.accessToken,
    )
    try:
        session = await run_in_threadpool(ctx.login, credentials)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except IdentityProviderError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return LoginResponse(
        sessionToken=session.token,
        identity=session.identity,
        pin=_pin_status(session.guard),
        notices=_notices(ctx),
    )


@router.post("/logout", response_model=ActionResponse)
async def logout(
    session: AdminSession = Depends(get_admin_session),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    await run_in_threadpool(ctx.logout, session.token)
    return ActionResponse(notices=_notices(ctx))


# ----- PIN -----

@router.get("/pin", response_model=PinStatus)
async def pin_status(session: AdminSession = Depends(get_admin_session)) -> PinStatus:
    return _pin_status(session.guard)


@router.post("/pin/digits", response_model=PinStatus)
async def press_digit(
    payload: PinDigitRequest, session: AdminSession = Depends(get_admin_session)
) -> PinStatus:
    try:
        session.guard.press(payload.digit)
    except PinLockedError as exc:
        raise _locked(exc)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _pin_status(session.guard)


@router.delete("/pin/digits", response_model=PinStatus)
async def delete_digit(session: AdminSession = Depends(get_admin_session)) -> PinStatus:
    session.guard.delete()
    return _pin_status(session.guard)


@router.put("/pin", response_model=ActionResponse)
async def update_pin(
    payload: PinUpdate,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    try:
        ctx.catalog.update_pin(payload.pin)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ActionResponse(notices=_notices(ctx))


@router.put("/credentials", response_model=ActionResponse)
async def update_credentials(
    payload: CredentialsUpdate,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    try:
        ctx.catalog.update_credentials(payload.username, payload.password)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ActionResponse(notices=_notices(ctx))


# ----- items -----

@router.get("/items", response_model=ManagedItemList)
async def list_items(
    q: str = Query(default="", max_length=200),
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ManagedItemList:
    items = ctx.catalog.managed_items(q)
    return ManagedItemList(count=len(items), items=items)


@router.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def add_item(
    payload: ItemCreate,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ItemResponse:
    try:
        item = ctx.catalog.submit_item(
            title=payload.title,
            description=payload.description,
            image=payload.image,
            category_id=payload.categoryId,
            tags=payload.tags,
            display_format=payload.format,
            recipe=payload.recipe,
        )
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ItemResponse(
        item=item,
        categoryName=ctx.catalog.root.category_name(item.categoryId),
        notices=_notices(ctx),
    )


@router.delete("/items/{item_id}", response_model=ActionResponse)
async def delete_item(
    item_id: str,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    ctx.catalog.delete_item(item_id)
    return ActionResponse(notices=_notices(ctx))


@router.post("/enhance", response_model=EnhanceResponse)
async def enhance(
    payload: EnhanceRequest,
    _: AdminSession = Depends(require_admin),
) -> EnhanceResponse:
    try:
        text = await run_in_threadpool(enhance_prompt, payload.idea)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except EnhancementError:
        raise HTTPException(status_code=502, detail="Content enhancement failed. Try again later.")
    return EnhanceResponse(description=text)


# ----- categories -----

@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def add_category(
    payload: CategoryCreate,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> CategoryResponse:
    try:
        category = ctx.catalog.add_category(payload.name, payload.icon)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return CategoryResponse(category=category, notices=_notices(ctx))


@router.delete("/categories/{category_id}", response_model=CategoryDeleteResponse)
async def delete_category(
    category_id: str,
    active_category: str = Query(default="all", alias="activeCategory"),
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> CategoryDeleteResponse:
    try:
        next_category = ctx.catalog.delete_category(category_id, active_category)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return CategoryDeleteResponse(activeCategory=next_category, notices=_notices(ctx))


# ----- social links -----

@router.post("/social-links", response_model=SocialLinkResponse, status_code=status.HTTP_201_CREATED)
async def add_social_link(
    payload: SocialLinkCreate,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> SocialLinkResponse:
    try:
        link = ctx.catalog.add_social_link(payload.platform, payload.url)
    except CatalogValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SocialLinkResponse(link=link, notices=_notices(ctx))


@router.delete("/social-links/{link_id}", response_model=ActionResponse)
async def delete_social_link(
    link_id: str,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    ctx.catalog.delete_social_link(link_id)
    return ActionResponse(notices=_notices(ctx))


# ----- inbox -----

@router.get("/messages", response_model=InboxResponse)
async def list_messages(
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> InboxResponse:
    messages = ctx.catalog.root.messages
    return InboxResponse(count=len(messages), messages=messages)


@router.delete("/messages", response_model=ActionResponse)
async def clear_messages(
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    ctx.catalog.clear_messages()
    return ActionResponse(notices=_notices(ctx))


@router.delete("/messages/{message_id}", response_model=ActionResponse)
async def delete_message(
    message_id: str,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    ctx.catalog.delete_message(message_id)
    return ActionResponse(notices=_notices(ctx))


# ----- backup & analytics -----

@router.get("/export")
async def export_backup(
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> Response:
    filename, payload = ctx.catalog.export_backup()
    ctx.catalog.notices.drain()
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ActionResponse)
async def import_backup(
    request: Request,
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> ActionResponse:
    body = await request.body()
    try:
        ctx.catalog.import_backup(body)
    except ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ActionResponse(notices=_notices(ctx))


@router.get("/analytics", response_model=AnalyticsSummary)
async def analytics(
    _: AdminSession = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
) -> AnalyticsSummary:
    root = ctx.catalog.root
    since = ctx.clock() - DAY_MS
    return AnalyticsSummary(
        totalVisits=len(root.analytics),
        visitsLast24h=sum(1 for ts in root.analytics if ts >= since),
        prompts=len(root.prompts),
        categories=len(root.categories),
        messages=len(root.messages),
        wishlist=len(root.wishlist),
    )
