"""
Service catalog and running ad management.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Tuple

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import Count, Q

from authentication.models import Role
from authentication.session import Session
from campaigns.models import AD_PLATFORMS, SERVICE_CATEGORIES, RunningAd, Service
from services.access_policy import Permission, require
from services.analytics import campaign_performance, service_performance
from services.exceptions import NotFoundError, PersistenceError, ValidationError
from services.lead_validation import parse_date

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000


def _text(data: Dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


def validate_service_data(data: Dict) -> List[str]:
    errors = []
    name = _text(data, "service_name")
    if not name:
        errors.append("Service name is required.")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append("Service name must be less than 255 characters.")

    category = _text(data, "service_category")
    if not category:
        errors.append("Service category is required.")
    elif category not in SERVICE_CATEGORIES:
        errors.append("Invalid service category.")

    if len(_text(data, "description")) > MAX_DESCRIPTION_LENGTH:
        errors.append("Description must be less than 1000 characters.")
    return errors


def list_services(session: Session, active_only: bool = True):
    """
    Catalog listing. Everyone can read the active catalog; the full list
    with usage counts is for service managers.
    """
    if active_only:
        return Service.objects.filter(is_active=True).order_by("service_category", "service_name")
    require(session, Permission.MANAGE_SERVICES)
    return Service.objects.select_related("created_by").annotate(
        running_ads_count=Count("running_ads", filter=Q(running_ads__is_active=True), distinct=True),
        leads_count=Count("leads", distinct=True),
    ).order_by("-created_at", "-id")


def create_service(session: Session, data: Dict) -> Service:
    require(session, Permission.MANAGE_SERVICES)
    errors = validate_service_data(data)
    if errors:
        raise ValidationError(errors)
    try:
        service = Service.objects.create(
            service_name=_text(data, "service_name"),
            service_category=_text(data, "service_category"),
            description=_text(data, "description"),
            created_by_id=session.user_id,
        )
    except DatabaseError:
        logger.exception("Failed to create service")
        raise PersistenceError("Failed to create service. Please try again.")
    logger.info("Service %s created by user %s", service.pk, session.user_id)
    return service


def toggle_service(session: Session, service_id: int) -> Service:
    """Flip a service between active and inactive. Services are never deleted."""
    require(session, Permission.MANAGE_SERVICES)
    service = Service.objects.filter(pk=service_id).first()
    if service is None:
        raise NotFoundError("Service not found")
    service.is_active = not service.is_active
    service.save(update_fields=["is_active"])
    logger.info("Service %s active=%s", service.pk, service.is_active)
    return service


def service_report(session: Session) -> List[Dict]:
    """Active services ranked by converted leads"""
    require(session, Permission.MANAGE_SERVICES)
    return service_performance()


def _parse_budget(value, errors: List[str]) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    try:
        budget = Decimal(str(value))
    except InvalidOperation:
        errors.append("Budget must be a positive number.")
        return Decimal("0")
    if not budget.is_finite() or budget < 0:
        errors.append("Budget must be a positive number.")
    return budget


def validate_ad_data(data: Dict) -> Tuple[Dict, List[str]]:
    """Validate a running ad form, returning the cleaned values and errors"""
    errors = []
    cleaned = {
        "ad_name": _text(data, "ad_name"),
        "platform": _text(data, "platform"),
        "target_audience": _text(data, "target_audience"),
        "ad_copy": _text(data, "ad_copy"),
    }

    if not cleaned["ad_name"]:
        errors.append("Ad name is required.")
    elif len(cleaned["ad_name"]) > MAX_NAME_LENGTH:
        errors.append("Ad name must be less than 255 characters.")

    service_id = data.get("service_id")
    if not service_id:
        errors.append("Service selection is required.")
    else:
        service = Service.objects.filter(pk=service_id).first() if str(service_id).isdigit() else None
        if service is None:
            errors.append("Invalid service selection.")
        cleaned["service"] = service

    if not cleaned["platform"]:
        errors.append("Platform is required.")
    elif cleaned["platform"] not in AD_PLATFORMS:
        errors.append("Invalid platform selection.")

    cleaned["budget"] = _parse_budget(data.get("budget"), errors)

    start_date = end_date = None
    if not data.get("start_date"):
        errors.append("Start date is required.")
    else:
        try:
            start_date = parse_date(data.get("start_date"))
        except ValueError:
            errors.append("Invalid start date format.")
    try:
        end_date = parse_date(data.get("end_date"))
    except ValueError:
        errors.append("Invalid end date format.")
    if start_date and end_date and end_date < start_date:
        errors.append("End date must be after start date.")
    cleaned["start_date"] = start_date
    cleaned["end_date"] = end_date

    member_id = data.get("assigned_sales_member")
    if not member_id:
        errors.append("Sales member assignment is required.")
    else:
        User = get_user_model()
        member = None
        if str(member_id).isdigit():
            member = User.objects.filter(pk=member_id, role=Role.SALES, is_active=True).first()
        if member is None:
            errors.append("Invalid sales member selection.")
        cleaned["assigned_sales_member"] = member

    return cleaned, errors


def list_ads(session: Session, active_only: bool = False) -> List[Dict]:
    require(session, Permission.MANAGE_ADS)
    return campaign_performance(active_only=active_only)


def create_ad(session: Session, data: Dict) -> RunningAd:
    require(session, Permission.MANAGE_ADS)
    cleaned, errors = validate_ad_data(data)
    if errors:
        raise ValidationError(errors)
    try:
        ad = RunningAd.objects.create(**cleaned, created_by_id=session.user_id)
    except DatabaseError:
        logger.exception("Failed to create running ad")
        raise PersistenceError("Failed to create ad. Please try again.")
    logger.info(
        "Running ad %s created by user %s, leads go to user %s",
        ad.pk,
        session.user_id,
        ad.assigned_sales_member_id,
    )
    return ad


def toggle_ad(session: Session, ad_id: int) -> RunningAd:
    require(session, Permission.MANAGE_ADS)
    ad = RunningAd.objects.filter(pk=ad_id).first()
    if ad is None:
        raise NotFoundError("Ad not found")
    ad.is_active = not ad.is_active
    ad.save(update_fields=["is_active", "updated_at"])
    logger.info("Running ad %s active=%s", ad.pk, ad.is_active)
    return ad
