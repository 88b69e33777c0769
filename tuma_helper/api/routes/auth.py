from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tuma_helper.db.base import get_db
from tuma_helper.db.models.user import User
from tuma_helper.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from tuma_helper.core.security import create_access_token, get_current_user, hash_password, verify_password

router = APIRouter()

@router.post("/register", response_model=UserResponse, status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    if user.confirm_password is not None and user.confirm_password != user.password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    existing = db.query(User).filter(User.email == user.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = User(
        email=user.email,
        full_name=user.full_name.strip(),
        password_hash=hash_password(user.password),
        role=user.role,
        phone=user.phone,
        city=user.city,
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    return new_user


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    token = create_access_token({"sub": user.email})

    return TokenResponse(access_token=token)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
