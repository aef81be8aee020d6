"""
Authentication endpoints: login, invitation signup and password reset.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from franchisehub.db import schemas
from franchisehub.db.database import get_db
from franchisehub.db.repositories import tenants as tenant_repo
from franchisehub.services import account_service
from franchisehub.utils.passwords import create_access_token, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=schemas.TokenResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = tenant_repo.get_user_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("login_failed email=%s", payload.email.strip().lower())
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account disabled")
    return {"access_token": create_access_token(user), "token_type": "bearer"}


@router.post("/signup-with-invite", response_model=schemas.SignupResponse, status_code=status.HTTP_201_CREATED)
def signup_with_invite(payload: schemas.SignupWithInvite, db: Session = Depends(get_db)):
    user, token = account_service.signup_with_invite(
        db,
        token=payload.token,
        password=payload.password,
        restaurant_name=payload.restaurant_name,
        restaurant_city=payload.restaurant_city,
    )
    return {"user": user, "access_token": token}


@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(payload: schemas.ForgotPasswordRequest, db: Session = Depends(get_db)):
    return {"message": account_service.request_password_reset(db, payload.email)}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(payload: schemas.ResetPasswordRequest, db: Session = Depends(get_db)):
    account_service.reset_password(db, email=payload.email, code=payload.code, new_password=payload.new_password)
    return {"message": "Password updated"}
