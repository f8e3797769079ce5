"""
Activity log: writes audit entries and reads the activity feed.
"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from authentication.session import Session
from leads.models import ActivityLog, Lead
from services.access_policy import Permission, require, visible_leads_predicate
from services.analytics import FOLLOW_UP_WINDOW_DAYS, days_overdue

logger = logging.getLogger(__name__)

# Actions: create_lead, update_lead, update_field, bulk_update, assign_lead,
# delete_lead, import_leads, export_leads
NOTIFICATION_LIMIT = 10


def log_activity(
    session: Optional[Session],
    action: str,
    details: str = "",
    lead: Optional[Lead] = None,
) -> Optional[ActivityLog]:
    """
    Record an activity entry.

    A failed audit write is logged and never undoes the operation it
    describes.
    """
    try:
        with transaction.atomic():
            return ActivityLog.objects.create(
                user_id=session.user_id if session else None,
                lead=lead,
                action=action,
                details=details,
            )
    except DatabaseError:
        logger.exception("Could not record activity %s", action)
        return None


def get_activity_logs(session: Session, page: int = 1, page_size: Optional[int] = None) -> Dict:
    """Paginated activity feed, newest first"""
    require(session, Permission.VIEW_ACTIVITY)
    page_size = page_size or settings.ACTIVITY_PAGE_SIZE
    page = max(int(page or 1), 1)
    offset = (page - 1) * page_size

    logs = ActivityLog.objects.select_related("user", "lead")
    total = logs.count()
    entries = [
        {
            "id": log.id,
            "action": log.action,
            "details": log.details,
            "user_name": log.user.display_name if log.user else None,
            "lead_id": log.lead_id,
            "client_name": log.lead.client_name if log.lead else None,
            "created_at": log.created_at,
        }
        for log in logs[offset:offset + page_size]
    ]
    total_pages = (total + page_size - 1) // page_size
    return {
        "logs": entries,
        "total": total,
        "page": page,
        "total_pages": total_pages,
    }


def _notification(lead: Lead, today=None) -> Dict:
    entry = {
        "lead_id": lead.id,
        "client_name": lead.client_name,
        "follow_up": lead.follow_up,
        "assigned_user": lead.assigned_to.display_name if lead.assigned_to else None,
    }
    if today is not None:
        entry["days_overdue"] = days_overdue(lead.follow_up, today)
    return entry


def follow_up_notifications(session: Session) -> Dict[str, List[Dict]]:
    """
    Upcoming (today to one week out) and overdue follow-ups, earliest first.
    """
    today = timezone.localdate()
    leads = Lead.objects.filter(visible_leads_predicate(session)).select_related("assigned_to")

    upcoming = leads.filter(
        follow_up__gte=today,
        follow_up__lte=today + timedelta(days=FOLLOW_UP_WINDOW_DAYS),
    ).order_by("follow_up", "id")[:NOTIFICATION_LIMIT]
    overdue = leads.filter(follow_up__lt=today).order_by("follow_up", "id")[:NOTIFICATION_LIMIT]

    return {
        "upcoming": [_notification(lead) for lead in upcoming],
        "overdue": [_notification(lead, today) for lead in overdue],
    }


def recent_lead_activity(session: Session, limit: int = 10) -> List[Dict]:
    """Most recently touched leads visible to the session"""
    leads = (
        Lead.objects.filter(visible_leads_predicate(session))
        .select_related("assigned_to", "source_ad")
        .order_by("-updated_at", "-id")[:limit]
    )
    return [
        {
            "id": lead.id,
            "client_name": lead.client_name,
            "client_status": lead.client_status,
            "created_at": lead.created_at,
            "updated_at": lead.updated_at,
            "assigned_user": lead.assigned_to.display_name if lead.assigned_to else None,
            "source_campaign": lead.source_ad.ad_name if lead.source_ad else None,
        }
        for lead in leads
    ]
