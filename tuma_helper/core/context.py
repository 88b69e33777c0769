# tuma_helper/core/context.py
"""
Per-request application context.

Language and city selection travel explicitly through `AppContext` instead of
living in process globals. Resolution order: request header, then the signed-in
user's stored preference, then the configured default.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from tuma_helper.core.config import settings
from tuma_helper.core.security import get_optional_user
from tuma_helper.db.models.user import User


@dataclass(frozen=True)
class AppContext:
    language: str
    city: Optional[str] = None
    user: Optional[User] = None


def _pick_language(accept_language: Optional[str]) -> Optional[str]:
    if not accept_language:
        return None
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().lower()
        if not tag:
            continue
        if tag in settings.supported_languages:
            return tag
        primary = tag.split("-")[0]
        if primary in settings.supported_languages:
            return primary
    return None


def resolve_context(
    accept_language: Optional[str] = None,
    city: Optional[str] = None,
    user: Optional[User] = None,
) -> AppContext:
    language = (
        _pick_language(accept_language)
        or (user.preferred_language if user else None)
        or settings.default_language
    )
    chosen_city = (city or "").strip() or (user.preferred_city if user else None)
    return AppContext(language=language, city=chosen_city, user=user)


def get_app_context(
    accept_language: Optional[str] = Header(default=None),
    x_city: Optional[str] = Header(default=None),
    user: Optional[User] = Depends(get_optional_user),
) -> AppContext:
    return resolve_context(accept_language, x_city, user)
