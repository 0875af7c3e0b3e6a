from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from promptverse.app.domain.models import ContactMessage
from promptverse.app.schemas.catalog import NoticeOut
from promptverse.services.pin_guard import PinState


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    accessToken: Optional[str] = None


class PinStatus(BaseModel):
    state: PinState
    digitsEntered: int = 0
    secondsRemaining: int = 0
    verified: bool = False


class LoginResponse(BaseModel):
    sessionToken: str
    identity: str
    pin: PinStatus
    notices: list[NoticeOut] = Field(default_factory=list)


class PinDigitRequest(BaseModel):
    digit: str = Field(..., min_length=1, max_length=1)


class PinUpdate(BaseModel):
    pin: Optional[str] = None


class CredentialsUpdate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ActionResponse(BaseModel):
    ok: bool = True
    notices: list[NoticeOut] = Field(default_factory=list)


class InboxResponse(BaseModel):
    count: int = 0
    messages: list[ContactMessage] = Field(default_factory=list)


class AnalyticsSummary(BaseModel):
    totalVisits: int
    visitsLast24h: int
    prompts: int
    categories: int
    messages: int
    wishlist: int
