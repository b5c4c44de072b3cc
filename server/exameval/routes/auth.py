import logging
from datetime import datetime, timezone, timedelta

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exameval.config import settings
from exameval.database import get_db
from exameval.dependencies import get_current_user
from exameval.errors import ErrorResponse
from exameval.models import User
from exameval.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
    UserEnvelope,
    UserResponse,
)
from exameval.services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def send_token_response(user: User, response: Response) -> AuthResponse:
    """Mint a token for the user, mirror it into a cookie and build the body."""
    token = create_access_token(user.id, user.role.value)
    response.set_cookie(
        "token",
        token,
        max_age=settings.cookie_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
    )
    return AuthResponse(data=UserResponse.model_validate(user), token=token)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    """Create an account and start a session for it"""
    if db.query(User).filter(User.email == request.email).first():
        raise ErrorResponse("User already exists with this email", 400)

    user = User(
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        role=request.role,
        phone=request.phone,
        institution=request.institution,
        bio=request.bio,
        section=request.section,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ErrorResponse("User already exists with this email", 400)
    db.refresh(user)

    logger.info("Registered %s as %s", user.email, user.role.value)
    return send_token_response(user, response)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == request.email).first()

    # Always verify so unknown emails cost the same as wrong passwords
    password_ok = verify_password(request.password, user.password_hash if user else None)

    if user is None:
        raise ErrorResponse("Invalid credentials", 401)
    if not user.is_active:
        raise ErrorResponse("Account is deactivated", 401)
    if not password_ok:
        raise ErrorResponse("Invalid credentials", 401)

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    return send_token_response(user, response)


@router.get("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Stateless: the client discards its token, the cookie is expired as a hint"""
    response.set_cookie(
        "token",
        "none",
        expires=datetime.now(timezone.utc) + timedelta(seconds=10),
        httponly=True,
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
async def get_me(user: User = Depends(get_current_user)):
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put("/updateprofile", response_model=UserEnvelope)
async def update_profile(
    request: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fields_to_update = {
        key: value
        for key, value in request.model_dump(exclude_unset=True).items()
        if value is not None
    }

    new_email = fields_to_update.get("email")
    if new_email and new_email != user.email:
        if db.query(User).filter(User.email == new_email).first():
            raise ErrorResponse("User already exists with this email", 400)

    for key, value in fields_to_update.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)

    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put("/updatepassword", response_model=AuthResponse)
async def update_password(
    request: UpdatePasswordRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not verify_password(request.current_password, user.password_hash):
        raise ErrorResponse("Current password is incorrect", 401)

    user.password_hash = hash_password(request.new_password)
    db.commit()
    db.refresh(user)

    return send_token_response(user, response)


@router.post("/forgotpassword", response_model=MessageResponse)
async def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Acknowledges only: no reset token is issued and no email is sent"""
    if db.query(User).filter(User.email == request.email).first() is None:
        raise ErrorResponse("There is no user with that email", 404)

    return MessageResponse(message="Password reset instructions sent to email")


@router.put("/resetpassword", response_model=MessageResponse)
@router.put("/resetpassword/{reset_token}", response_model=MessageResponse)
async def reset_password(reset_token: str = ""):
    """Acknowledges only: no password is changed"""
    return MessageResponse(message="Password reset successful")
