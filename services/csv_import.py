"""
CSV lead import.

Headers are matched loosely (``name``, ``Company`` and ``client_name`` all
map to the client name). Bad rows are reported and skipped; the rest of
the file still imports.
"""
import csv
import io
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction

from authentication.session import Session
from leads.models import CSV_IMPORT_SOURCE, Lead
from services.access_policy import Permission, is_admin, require
from services.activity_logger import log_activity
from services.assignment_resolver import active_sales_user_id
from services.exceptions import ImportFileError
from services.lead_validation import is_valid_email, normalize_url

logger = logging.getLogger(__name__)

FIELD_SYNONYMS: Dict[str, List[str]] = {
    "client_name": ["client_name", "name", "client", "company", "company_name"],
    "email": ["email", "email_address", "contact_email"],
    "phone": ["phone", "phone_number", "contact_number", "mobile"],
    "website": ["website", "url", "company_website"],
    "required_services": ["services", "required_services", "needed_services"],
    "industry": ["industry", "business_type", "sector"],
    "notes": ["notes", "description", "comments", "remarks"],
    "call_enquiry": ["call_enquiry", "enquiry", "inquiry", "call_notes"],
}
REQUIRED_FIELDS = ["client_name"]
PREVIEW_ROWS = 5


@dataclass
class ImportSummary:
    total_rows: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: List[str] = field(default_factory=list)

    @property
    def error_preview(self) -> List[str]:
        return self.error_details[: settings.LEADS_IMPORT_ERROR_PREVIEW]

    @property
    def message(self) -> str:
        if not self.imported:
            return "No leads were imported. Please check your CSV file format."
        message = f"Successfully imported {self.imported} leads!"
        if self.errors:
            message += f" {self.errors} rows had errors."
        if self.skipped:
            message += f" {self.skipped} empty rows were skipped."
        return message

    def as_dict(self) -> Dict:
        return {
            "total_rows": self.total_rows,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": self.errors,
            "error_details": self.error_details,
            "error_preview": self.error_preview,
            "message": self.message,
        }


def validate_upload(upload) -> None:
    """Reject files by extension and size before reading them"""
    errors = []
    extension = os.path.splitext(upload.name or "")[1].lower()
    if extension != ".csv":
        errors.append("Only CSV files are allowed.")
    if upload.size is not None and upload.size > settings.LEADS_IMPORT_MAX_UPLOAD_SIZE:
        limit_mb = settings.LEADS_IMPORT_MAX_UPLOAD_SIZE // (1024 * 1024)
        errors.append(f"File size must be less than {limit_mb}MB.")
    if errors:
        raise ImportFileError(errors)


def read_rows(upload) -> List[List[str]]:
    """Decode the upload and split it into CSV rows (header included)"""
    raw = upload.read()
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ImportFileError(["The CSV file could not be read. Please save it as UTF-8."])
    try:
        rows = list(csv.reader(io.StringIO(raw, newline="")))
    except csv.Error as exc:
        raise ImportFileError([f"Error processing CSV file: {exc}"])
    if not rows:
        raise ImportFileError(["The CSV file appears to be empty."])
    return rows


def map_headers(headers: List[str]) -> Dict[str, int]:
    """
    Map lead fields to column indexes.

    Matching is case-insensitive and the first matching column wins.
    """
    normalized = [header.strip().lower() for header in headers]
    header_map = {}
    for lead_field, synonyms in FIELD_SYNONYMS.items():
        for index, header in enumerate(normalized):
            if header in synonyms:
                header_map[lead_field] = index
                break
    missing = [name for name in REQUIRED_FIELDS if name not in header_map]
    if missing:
        raise ImportFileError([f"Missing required columns: {', '.join(missing)}"])
    return header_map


def _row_values(row: List[str], header_map: Dict[str, int]) -> Dict[str, str]:
    return {
        lead_field: row[index].strip() if index < len(row) else ""
        for lead_field, index in header_map.items()
    }


def _row_error(values: Dict[str, str]) -> Optional[str]:
    if not values.get("client_name"):
        return "Client name is required"
    if values.get("email") and not is_valid_email(values["email"]):
        return "Invalid email format"
    if values.get("website"):
        fixed = normalize_url(values["website"])
        if fixed is None:
            return "Invalid website URL"
        values["website"] = fixed
    return None


def import_leads_csv(session: Session, upload, default_assigned_to=None) -> ImportSummary:
    """
    Import leads from an uploaded CSV file.

    Admins may name a sales user for the whole batch (or leave it
    unassigned); anyone else gets the imported leads assigned to them.
    """
    require(session, Permission.IMPORT_LEADS)
    validate_upload(upload)

    if is_admin(session):
        assigned_to_id = active_sales_user_id(default_assigned_to)
    else:
        assigned_to_id = session.user_id

    rows = read_rows(upload)
    header_map = map_headers(rows[0])
    data_rows = rows[1:]

    summary = ImportSummary(total_rows=len(data_rows))
    for row_index, row in enumerate(data_rows):
        row_number = row_index + 2
        if not any(cell.strip() for cell in row):
            summary.skipped += 1
            continue

        values = _row_values(row, header_map)
        error = _row_error(values)
        if error:
            summary.errors += 1
            summary.error_details.append(f"Row {row_number}: {error}")
            continue

        try:
            with transaction.atomic():
                Lead.objects.create(
                    **values,
                    assigned_to_id=assigned_to_id,
                    lead_source=CSV_IMPORT_SOURCE,
                )
        except DatabaseError:
            logger.exception("Database error importing row %s", row_number)
            summary.errors += 1
            summary.error_details.append(f"Row {row_number}: Database error occurred")
            continue
        summary.imported += 1

    log_activity(
        session,
        "import_leads",
        f"Imported {summary.imported} of {summary.total_rows} rows from {os.path.basename(upload.name)}",
    )
    logger.info(
        "CSV import by user %s: %s imported, %s skipped, %s errors",
        session.user_id,
        summary.imported,
        summary.skipped,
        summary.errors,
    )
    return summary


def preview_csv(session: Session, upload) -> Dict:
    """Headers, the first few data rows and the row count, without importing"""
    require(session, Permission.IMPORT_LEADS)
    validate_upload(upload)
    rows = read_rows(upload)
    headers = [header.strip() for header in rows[0]]
    data_rows = rows[1:]
    return {
        "headers": headers,
        "sample_rows": data_rows[:PREVIEW_ROWS],
        "total_rows": len(data_rows),
    }
