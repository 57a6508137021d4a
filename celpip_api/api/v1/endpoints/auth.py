from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from celpip_api.core.database import get_session
from celpip_api.schemas.auth import LoginRequest, SignupRequest, UserResponse
from celpip_api.services import auth_service

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=UserResponse)
def login(
    login_data: LoginRequest,
    session: Session = Depends(get_session)
):
    """Login with email and password."""
    user = auth_service.authenticate(session, login_data.email, login_data.password)
    return UserResponse.model_validate(user)


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(
    signup_data: SignupRequest,
    session: Session = Depends(get_session)
):
    """Register a new user."""
    user = auth_service.register(session, signup_data.email, signup_data.password, signup_data.name)
    return UserResponse.model_validate(user)
