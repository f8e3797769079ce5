"""
CSV export of the leads visible to the caller.

Rows are produced lazily so large exports are streamed to the client
instead of being built in memory.
"""
import csv
import logging
from typing import Iterator, List

from django.utils import timezone

from authentication.session import Session
from leads.models import Lead
from services.access_policy import Permission, can, require
from services.activity_logger import log_activity
from services.lead_repository import visible_leads

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "ID",
    "Client Name",
    "Required Services",
    "Website",
    "Phone",
    "Email",
    "Call Enquiry",
    "Secondary Email",
    "WhatsApp",
    "Follow Up Date",
    "Status",
    "Notes",
    "Industry",
    "Created Date",
    "Updated Date",
]
ASSIGNED_TO_COLUMN = "Assigned To"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Echo:
    """File-like object whose write() hands the line back to csv.writer's caller"""

    def write(self, value):
        return value


def export_columns(session: Session) -> List[str]:
    columns = list(EXPORT_COLUMNS)
    if can(session.role, Permission.VIEW_ALL_LEADS):
        columns.append(ASSIGNED_TO_COLUMN)
    return columns


def _format_datetime(value) -> str:
    if value is None:
        return ""
    return timezone.localtime(value).strftime(DATETIME_FORMAT)


def lead_row(lead: Lead, include_assignee: bool) -> List:
    row = [
        lead.id,
        lead.client_name,
        lead.required_services,
        lead.website,
        lead.phone,
        lead.email,
        lead.call_enquiry,
        lead.mail,
        lead.whatsapp,
        lead.follow_up.isoformat() if lead.follow_up else "",
        lead.client_status,
        lead.notes,
        lead.industry,
        _format_datetime(lead.created_at),
        _format_datetime(lead.updated_at),
    ]
    if include_assignee:
        row.append(lead.assigned_to.display_name if lead.assigned_to else "Unassigned")
    return row


def export_filename(now=None) -> str:
    now = now or timezone.localtime()
    return f"leads_export_{now:%Y-%m-%d_%H-%M-%S}.csv"


def _generate_rows(session: Session) -> Iterator[List]:
    include_assignee = can(session.role, Permission.VIEW_ALL_LEADS)
    yield export_columns(session)
    for lead in visible_leads(session).iterator(chunk_size=500):
        yield lead_row(lead, include_assignee)


def export_rows(session: Session) -> Iterator[List]:
    """
    Header row followed by one row per visible lead, newest first.

    Permission is checked immediately; the rows themselves are produced
    lazily.
    """
    require(session, Permission.EXPORT_LEADS, "You do not have permission to export leads.")
    count = visible_leads(session).count()
    log_activity(session, "export_leads", f"{count} leads exported")
    logger.info("User %s exported %s leads", session.user_id, count)
    return _generate_rows(session)


def export_csv_lines(session: Session) -> Iterator[str]:
    """Encoded CSV lines for a streaming response"""
    writer = csv.writer(Echo())
    return (writer.writerow(row) for row in export_rows(session))
