from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, Response

from clicktrip.adapters.api.dependencies import get_settings_service
from clicktrip.adapters.api.schemas.settings import UserSettingsSchema
from clicktrip.app.services.settings_service import (
    SETTINGS_COOKIE_NAME,
    SettingsService,
)
from clicktrip.domain.models import UserSettings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=UserSettingsSchema)
def read_settings(
    settings_cookie: str | None = Cookie(default=None, alias=SETTINGS_COOKIE_NAME),
    service: SettingsService = Depends(get_settings_service),
) -> UserSettingsSchema:
    s = service.parse(settings_cookie)
    return UserSettingsSchema(radius=s.radius, time_window=s.time_window)


@router.put("", response_model=UserSettingsSchema)
def save_settings(
    req: UserSettingsSchema,
    response: Response,
    service: SettingsService = Depends(get_settings_service),
) -> UserSettingsSchema:
    settings = UserSettings(radius=req.radius, time_window=req.time_window)
    response.set_cookie(
        key=service.cookie_name,
        value=service.serialize(settings),
        max_age=service.max_age_s,
        samesite="strict",
    )
    return req
