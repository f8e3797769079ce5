"""
Field validation shared by the lead form, the API and the CSV importer.
"""
import re
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator, validate_email

from leads.models import ClientStatus

PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-\(\)]+$")

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d-%m-%Y", "%d/%m/%Y", "%m/%d/%Y", "%d %B %Y", "%B %d, %Y")

TEXT_FIELDS = (
    "client_name",
    "required_services",
    "website",
    "phone",
    "email",
    "call_enquiry",
    "mail",
    "whatsapp",
    "notes",
    "industry",
)

_url_validator = URLValidator()


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value)
    except DjangoValidationError:
        return False
    return True


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def normalize_url(value: str) -> Optional[str]:
    """
    Return the URL to store, or None when it is not a URL.

    Bare domains such as ``example.com`` are retried with an ``http://``
    prefix and the prefixed form is what gets stored.
    """
    for candidate in (value, f"http://{value}"):
        try:
            _url_validator(candidate)
            return candidate
        except DjangoValidationError:
            continue
    return None


def parse_date(value) -> Optional[date]:
    """Parse a follow-up date. Empty input is None; garbage raises ValueError."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}")


def is_valid_status(value: str) -> bool:
    return value in ClientStatus.values


def clean_lead_data(data: Dict) -> Tuple[Dict, List[str]]:
    """
    Validate a full lead form.

    Returns the cleaned values and the list of error messages; the values
    must not be written when the list is non-empty.
    """
    cleaned: Dict = {}
    errors: List[str] = []

    for field in TEXT_FIELDS:
        value = data.get(field)
        cleaned[field] = "" if value is None else str(value).strip()

    if not cleaned["client_name"]:
        errors.append("Client name is required.")

    for field in ("email", "mail"):
        if cleaned[field] and not is_valid_email(cleaned[field]):
            errors.append("Please enter a valid email address.")
            break

    if cleaned["phone"] and not is_valid_phone(cleaned["phone"]):
        errors.append("Please enter a valid phone number.")

    if cleaned["website"]:
        fixed = normalize_url(cleaned["website"])
        if fixed is None:
            errors.append("Please enter a valid website URL.")
        else:
            cleaned["website"] = fixed

    try:
        cleaned["follow_up"] = parse_date(data.get("follow_up"))
    except ValueError:
        errors.append("Please enter a valid follow-up date.")

    status = data.get("client_status") or ""
    status = str(status).strip()
    if not is_valid_status(status):
        errors.append("Please select a valid client status.")
    cleaned["client_status"] = status

    return cleaned, errors
