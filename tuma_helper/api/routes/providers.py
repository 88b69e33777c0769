# tuma_helper/api/routes/providers.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tuma_helper.core import notices
from tuma_helper.core.exceptions import NotFound
from tuma_helper.core.security import require_provider
from tuma_helper.db.base import get_db
from tuma_helper.db.models.provider_profile import ProviderProfile
from tuma_helper.db.models.user import User
from tuma_helper.schemas.common import ActionResult
from tuma_helper.schemas.provider_profile import ProviderProfileResponse, ProviderProfileUpdate

router = APIRouter(prefix="/providers", tags=["providers"])


def _profile_or_blank(db: Session, provider_id: int) -> ProviderProfileResponse:
    profile = db.query(ProviderProfile).filter(ProviderProfile.provider_id == provider_id).first()
    if not profile:
        return ProviderProfileResponse(provider_id=provider_id)
    return ProviderProfileResponse.model_validate(profile)


@router.get("/me/profile", response_model=ProviderProfileResponse)
def get_my_provider_profile(db: Session = Depends(get_db), current_user: User = Depends(require_provider)):
    return _profile_or_blank(db, current_user.id)


# Upsert: the first save creates the row
@router.put("/me/profile", response_model=ActionResult[ProviderProfileResponse])
def update_my_provider_profile(
    update_data: ProviderProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_provider),
):
    profile = db.query(ProviderProfile).filter(ProviderProfile.provider_id == current_user.id).first()
    if not profile:
        profile = ProviderProfile(provider_id=current_user.id, service_areas=[], portfolio_urls=[])
        db.add(profile)

    changes = update_data.model_dump(exclude_unset=True)
    for field in ("service_areas", "portfolio_urls"):
        if field in changes:
            # drop blanks and duplicates, keep order
            changes[field] = list(dict.fromkeys(v.strip() for v in changes[field] or [] if v and v.strip()))
    for field in ("hourly_rate", "years_of_experience"):
        if field in changes and changes[field] is None:
            changes[field] = 0
    for field, value in changes.items():
        setattr(profile, field, value)

    db.commit()
    db.refresh(profile)
    return ActionResult[ProviderProfileResponse](
        notice=notices.success("Profile updated", "Your provider profile has been saved"),
        data=ProviderProfileResponse.model_validate(profile),
    )


@router.get("/{provider_id}/profile", response_model=ProviderProfileResponse)
def get_provider_profile(provider_id: int, db: Session = Depends(get_db)):
    provider = db.query(User).filter(User.id == provider_id, User.role == "provider").first()
    if not provider:
        raise NotFound("Provider not found")
    return _profile_or_blank(db, provider.id)
