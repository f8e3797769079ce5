"""
Staff account management (admin only).
"""
import logging
from typing import Dict, List

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from authentication.models import Role
from authentication.session import Session
from services.access_policy import Permission, require
from services.exceptions import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def list_users(session: Session) -> List:
    require(session, Permission.MANAGE_USERS)
    User = get_user_model()
    return list(User.objects.order_by("-date_joined", "-id"))


def sales_staff() -> List:
    """Active sales users, the only valid lead assignees"""
    User = get_user_model()
    return list(User.objects.filter(role=Role.SALES, is_active=True).order_by("full_name", "username"))


def create_user(session: Session, data: Dict):
    require(session, Permission.MANAGE_USERS)
    User = get_user_model()

    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    full_name = (data.get("full_name") or "").strip()
    role = (data.get("role") or "").strip()

    errors = []
    if not (username and password and full_name and role):
        errors.append("All fields are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append("Password must be at least 6 characters long.")
    if role not in Role.values:
        errors.append("Invalid role selected.")
    if not errors:
        try:
            validate_password(password)
        except DjangoValidationError as exc:
            errors.extend(exc.messages)
    if not errors and User.objects.filter(username__iexact=username).exists():
        errors.append("Username already exists.")
    if errors:
        raise ValidationError(errors)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                password=password,
                full_name=full_name,
                role=role,
            )
    except IntegrityError:
        raise ValidationError(["Username already exists."])
    except DatabaseError:
        logger.exception("Failed to create user %s", username)
        raise PersistenceError("Failed to create user. Please try again.")

    logger.info("User %s (%s) created by user %s", user.pk, role, session.user_id)
    return user


def toggle_user_active(session: Session, user_id: int):
    """
    Activate or deactivate an account.

    Admins cannot deactivate themselves, and the last active admin can
    never be deactivated.
    """
    require(session, Permission.MANAGE_USERS)
    User = get_user_model()

    if int(user_id) == session.user_id:
        raise ValidationError(["You cannot change your own account status."])

    with transaction.atomic():
        user = User.objects.select_for_update().filter(pk=user_id).first()
        if user is None:
            raise NotFoundError("User not found")

        if user.is_active and user.role == Role.ADMIN:
            other_admins = User.objects.filter(role=Role.ADMIN, is_active=True).exclude(pk=user.pk)
            if not other_admins.exists():
                raise ValidationError(["At least one active admin is required."])

        user.is_active = not user.is_active
        user.save(update_fields=["is_active"])

    logger.info("User %s active=%s (changed by user %s)", user.pk, user.is_active, session.user_id)
    return user
