"""
Lead persistence with role-based visibility applied to every query.

All functions take the caller's Session. A lead outside the caller's
visibility behaves exactly like a lead that does not exist.
"""
import logging
from typing import Dict, Iterable, List, Optional

from django.db import DatabaseError, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from authentication.session import Session
from campaigns.models import Service
from leads.models import CSV_IMPORT_SOURCE, LEAD_SOURCES, Lead
from services.access_policy import Permission, require, visible_leads_predicate
from services.activity_logger import log_activity
from services.assignment_resolver import active_sales_user_id, resolve_assignment
from services.exceptions import NotFoundError, PersistenceError, ValidationError
from services.lead_validation import clean_lead_data, is_valid_status, parse_date

logger = logging.getLogger(__name__)

INLINE_FIELDS = ("follow_up", "client_status", "notes", "industry")
BULK_FIELDS = ("client_status", "industry", "assigned_to")
SUGGESTION_MIN_LENGTH = 2
SUGGESTION_LIMIT = 10


def visible_leads(session: Session) -> QuerySet:
    """Base queryset of the leads the session may see, newest first"""
    return (
        Lead.objects.filter(visible_leads_predicate(session))
        .select_related("assigned_to", "source_ad")
        .order_by("-created_at", "-id")
    )


def get_by_id(session: Session, lead_id: int) -> Lead:
    try:
        return visible_leads(session).get(pk=lead_id)
    except (Lead.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Lead not found or access denied")


def list_for_role(session: Session) -> List[Lead]:
    return list(visible_leads(session))


def _clean_lead_source(value) -> str:
    source = str(value).strip() if value else "Manual"
    if source not in LEAD_SOURCES and source != CSV_IMPORT_SOURCE:
        raise ValidationError(["Please select a valid lead source."])
    return source


def _selected_services(service_ids: Optional[Iterable]) -> List[Service]:
    if not service_ids:
        return []
    ids = []
    for value in service_ids:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    return list(Service.objects.filter(pk__in=ids, is_active=True))


def _save(lead: Lead, services: Optional[List[Service]] = None) -> Lead:
    try:
        with transaction.atomic():
            lead.save()
            if services is not None:
                lead.selected_services.set(services)
    except DatabaseError:
        logger.exception("Failed to save lead %s", lead.pk or "(new)")
        raise PersistenceError()
    return lead


def create(session: Session, data: Dict) -> Lead:
    """Validate and insert a lead, resolving its owner"""
    require(session, Permission.ADD_LEADS)

    cleaned, errors = clean_lead_data(data)
    if errors:
        raise ValidationError(errors)
    lead_source = _clean_lead_source(data.get("lead_source"))

    decision = resolve_assignment(
        session,
        lead_source,
        source_ad_id=data.get("source_ad_id"),
        requested_assigned_to=data.get("assigned_to"),
    )

    lead = Lead(
        **cleaned,
        lead_source=lead_source,
        source_ad=decision.source_ad,
        assigned_to_id=decision.assigned_to_id,
    )
    _save(lead, _selected_services(data.get("selected_service_ids")))

    details = f"Created lead '{lead.client_name}'"
    if decision.auto_assigned:
        details += f" (auto-assigned from ad '{decision.source_ad.ad_name}')"
    log_activity(session, "create_lead", details, lead)
    logger.info("Lead %s created by user %s", lead.pk, session.user_id)
    return lead


def update(session: Session, lead_id: int, data: Dict, confirm_auto_assign: bool = False) -> Lead:
    """
    Replace every editable field of a lead.

    Only admins can change the owner; an ad-derived source reassigns the
    lead to the ad's sales member only when confirm_auto_assign is set.
    Missing lead_source, source_ad_id and assigned_to keep the stored values.
    """
    require(session, Permission.EDIT_LEADS)
    lead = get_by_id(session, lead_id)

    cleaned, errors = clean_lead_data(data)
    if errors:
        raise ValidationError(errors)
    lead_source = _clean_lead_source(data.get("lead_source", lead.lead_source))

    decision = resolve_assignment(
        session,
        lead_source,
        source_ad_id=data.get("source_ad_id", lead.source_ad_id),
        requested_assigned_to=data.get("assigned_to", lead.assigned_to_id),
        existing_lead=lead,
        confirm_auto_assign=confirm_auto_assign,
    )

    for field, value in cleaned.items():
        setattr(lead, field, value)
    lead.lead_source = lead_source
    lead.source_ad = decision.source_ad
    lead.assigned_to_id = decision.assigned_to_id

    services = None
    if "selected_service_ids" in data:
        services = _selected_services(data.get("selected_service_ids"))
    _save(lead, services)

    log_activity(session, "update_lead", f"Updated lead '{lead.client_name}'", lead)
    return lead


def _clean_inline_value(field: str, value):
    if field == "follow_up":
        try:
            return parse_date(value)
        except ValueError:
            raise ValidationError(["Please enter a valid follow-up date."])
    value = "" if value is None else str(value).strip()
    if field == "client_status" and not is_valid_status(value):
        raise ValidationError(["Please select a valid client status."])
    return value


def update_field(session: Session, lead_id: int, field: str, value) -> Lead:
    """Inline edit of a single whitelisted field"""
    require(session, Permission.EDIT_LEADS)
    if field not in INLINE_FIELDS:
        raise ValidationError(["Invalid field specified"])

    lead = get_by_id(session, lead_id)
    setattr(lead, field, _clean_inline_value(field, value))
    try:
        lead.save(update_fields=[field, "updated_at"])
    except DatabaseError:
        logger.exception("Failed to update %s on lead %s", field, lead.pk)
        raise PersistenceError()

    log_activity(session, "update_field", f"Set {field} on lead '{lead.client_name}'", lead)
    return lead


def bulk_update_field(session: Session, lead_ids: Iterable, field: str, value) -> int:
    """
    Apply one field value to many leads.

    Leads outside the caller's visibility are silently left alone; the
    return value is the number of rows actually changed.
    """
    require(session, Permission.EDIT_LEADS)
    if field not in BULK_FIELDS:
        raise ValidationError(["Invalid field specified"])

    if field == "assigned_to":
        require(session, Permission.ASSIGN_LEADS)
        value = active_sales_user_id(value)
        field_name = "assigned_to_id"
    else:
        value = "" if value is None else str(value).strip()
        if field == "client_status" and not is_valid_status(value):
            raise ValidationError(["Please select a valid client status."])
        field_name = field

    ids = []
    for lead_id in lead_ids or []:
        try:
            ids.append(int(lead_id))
        except (TypeError, ValueError):
            continue
    if not ids:
        raise ValidationError(["No leads selected"])

    try:
        updated = Lead.objects.filter(visible_leads_predicate(session), pk__in=ids).update(
            **{field_name: value, "updated_at": timezone.now()}
        )
    except DatabaseError:
        logger.exception("Bulk update of %s failed", field)
        raise PersistenceError()

    log_activity(session, "bulk_update", f"Set {field} on {updated} leads")
    logger.info("User %s bulk-updated %s on %s leads", session.user_id, field, updated)
    return updated


def assign(session: Session, lead_id: int, assigned_to) -> Lead:
    """Manually (re)assign a lead; empty assigned_to unassigns it"""
    require(session, Permission.ASSIGN_LEADS)
    lead = get_by_id(session, lead_id)
    lead.assigned_to_id = active_sales_user_id(assigned_to)
    try:
        lead.save(update_fields=["assigned_to", "updated_at"])
    except DatabaseError:
        logger.exception("Failed to assign lead %s", lead.pk)
        raise PersistenceError()

    log_activity(
        session,
        "assign_lead",
        f"Assigned lead '{lead.client_name}' to user {lead.assigned_to_id or 'nobody'}",
        lead,
    )
    return lead


def delete(session: Session, lead_id: int) -> None:
    require(session, Permission.DELETE_LEADS)
    lead = get_by_id(session, lead_id)
    name, pk = lead.client_name, lead.pk
    try:
        lead.delete()
    except DatabaseError:
        logger.exception("Failed to delete lead %s", pk)
        raise PersistenceError()

    log_activity(session, "delete_lead", f"Deleted lead #{pk} '{name}'")
    logger.info("Lead %s deleted by user %s", pk, session.user_id)


def suggest(session: Session, query: str) -> List[Dict]:
    """Autocomplete on name, email and phone"""
    query = (query or "").strip()
    if len(query) < SUGGESTION_MIN_LENGTH:
        return []
    leads = (
        Lead.objects.filter(visible_leads_predicate(session))
        .filter(
            Q(client_name__icontains=query)
            | Q(email__icontains=query)
            | Q(phone__icontains=query)
        )
        .order_by("client_name", "id")
        .values("id", "client_name", "email", "phone")[:SUGGESTION_LIMIT]
    )
    return list(leads)
