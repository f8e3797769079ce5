import logging
from datetime import datetime
from typing import List

from django.contrib.auth import authenticate
from ninja import Router, Schema
from ninja.security import django_auth

from .jwt_auth import create_access_token, jwt_auth
from .session import session_from_request
from services import user_service

logger = logging.getLogger(__name__)

router = Router(auth=[jwt_auth, django_auth])


class LoginSchema(Schema):
    username: str
    password: str


class TokenResponse(Schema):
    access_token: str
    token_type: str = "bearer"
    role: str


class SessionSchema(Schema):
    user_id: int
    username: str
    full_name: str
    role: str


class CreateUserSchema(Schema):
    username: str = ""
    password: str = ""
    full_name: str = ""
    role: str = ""


class UserResponseSchema(Schema):
    id: int
    username: str
    full_name: str
    role: str
    is_active: bool
    date_joined: datetime

    class Config:
        from_attributes = True


@router.post("/login", response={200: TokenResponse, 401: dict}, auth=None)
def login(request, data: LoginSchema):
    """Login and get JWT token"""
    user = authenticate(request, username=data.username, password=data.password)

    if user is None:
        logger.info("Failed API login for %s", data.username)
        return 401, {"error": "Invalid username or password"}

    return {
        "access_token": create_access_token(user),
        "token_type": "bearer",
        "role": user.role,
    }


@router.get("/me", response=SessionSchema)
def me(request):
    """Current user and role"""
    session = session_from_request(request)
    return {
        "user_id": session.user_id,
        "username": session.username,
        "full_name": session.full_name,
        "role": session.role,
    }


@router.get("/users", response=List[UserResponseSchema])
def list_users(request):
    return user_service.list_users(session_from_request(request))


@router.post("/users", response={201: UserResponseSchema})
def create_user(request, data: CreateUserSchema):
    """Create a staff account (admin only)"""
    user = user_service.create_user(session_from_request(request), data.dict())
    return 201, user


@router.post("/users/{int:user_id}/toggle", response=UserResponseSchema)
def toggle_user(request, user_id: int):
    """Activate or deactivate an account. Self-deactivation is refused."""
    return user_service.toggle_user_active(session_from_request(request), user_id)
