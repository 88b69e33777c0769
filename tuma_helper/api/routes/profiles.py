# tuma_helper/api/routes/profiles.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tuma_helper.core import notices
from tuma_helper.core.config import settings
from tuma_helper.core.context import AppContext, get_app_context
from tuma_helper.core.exceptions import NotFound, ValidationFailed
from tuma_helper.core.security import get_current_user
from tuma_helper.db.base import get_db
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.user import (
    ContextResponse,
    PreferencesUpdate,
    ProfileUpdate,
    PublicProfile,
    UserResponse,
)

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=UserResponse)
def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=ActionResult[UserResponse])
def update_my_profile(
    update_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return ActionResult[UserResponse](
        notice=notices.success("Profile updated"),
        data=UserResponse.model_validate(current_user),
    )


@router.put("/me/preferences", response_model=ActionResult[ContextResponse])
def update_preferences(
    prefs: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if prefs.language is not None:
        language = prefs.language.strip().lower()
        if language not in settings.supported_languages:
            raise ValidationFailed(f"Unsupported language '{prefs.language}'")
        current_user.preferred_language = language
    if prefs.city is not None:
        # empty string clears the city filter
        current_user.preferred_city = prefs.city.strip() or None

    db.commit()
    db.refresh(current_user)
    return ActionResult[ContextResponse](
        notice=notices.success("Preferences saved"),
        data=ContextResponse(
            language=current_user.preferred_language or settings.default_language,
            city=current_user.preferred_city,
        ),
    )


@router.get("/context", response_model=ContextResponse)
def current_context(context: AppContext = Depends(get_app_context)):
    return ContextResponse(language=context.language, city=context.city)


@router.get("/{user_id}", response_model=PublicProfile)
def get_public_profile(user_id: int, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
    if not user:
        raise NotFound("Profile not found")
    return user
