"""
Lead search and filtering.
"""
import logging
from dataclasses import dataclass, fields
from datetime import date
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Q, QuerySet

from authentication.session import Session
from leads.models import Lead
from services.access_policy import is_admin
from services.lead_repository import visible_leads
from services.lead_validation import parse_date

logger = logging.getLogger(__name__)

UNASSIGNED = -1


@dataclass
class LeadFilters:
    search: Optional[str] = None
    status: Optional[str] = None
    industry: Optional[str] = None
    assigned_to: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    lead_source: Optional[str] = None
    has_follow_up: bool = False

    @classmethod
    def from_params(cls, params: Dict) -> "LeadFilters":
        """
        Build filters from request parameters.

        Blank strings and zero are treated as "not filtering". Unparseable
        dates and ids are ignored rather than rejected.
        """

        def text(name):
            value = params.get(name)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        def number(name):
            try:
                value = int(params.get(name) or 0)
            except (TypeError, ValueError):
                return None
            return value or None

        def day(name):
            try:
                return parse_date(params.get(name))
            except ValueError:
                return None

        has_follow_up = params.get("has_follow_up")
        if isinstance(has_follow_up, str):
            has_follow_up = has_follow_up.strip().lower() not in ("", "0", "false", "no", "off")

        return cls(
            search=text("search"),
            status=text("status"),
            industry=text("industry"),
            assigned_to=number("assigned_to"),
            date_from=day("date_from"),
            date_to=day("date_to"),
            lead_source=text("lead_source"),
            has_follow_up=bool(has_follow_up),
        )

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


def build_filter_query(session: Session, filters: LeadFilters) -> Q:
    """Predicate for the filters alone; combine with the visibility predicate"""
    query = Q()
    if filters.search:
        term = filters.search
        query &= (
            Q(client_name__icontains=term)
            | Q(email__icontains=term)
            | Q(phone__icontains=term)
            | Q(required_services__icontains=term)
        )
    if filters.status:
        query &= Q(client_status=filters.status)
    if filters.industry:
        query &= Q(industry=filters.industry)
    if filters.assigned_to and is_admin(session):
        if filters.assigned_to == UNASSIGNED:
            query &= Q(assigned_to__isnull=True)
        else:
            query &= Q(assigned_to_id=filters.assigned_to)
    if filters.date_from:
        query &= Q(created_at__date__gte=filters.date_from)
    if filters.date_to:
        query &= Q(created_at__date__lte=filters.date_to)
    if filters.lead_source:
        query &= Q(lead_source=filters.lead_source)
    if filters.has_follow_up:
        query &= Q(follow_up__isnull=False)
    return query


def filtered_leads(session: Session, filters: LeadFilters) -> QuerySet:
    return visible_leads(session).filter(build_filter_query(session, filters))


@dataclass
class SearchResult:
    leads: List[Lead]
    total: int
    truncated: bool


def search_leads(session: Session, filters: LeadFilters, limit: Optional[int] = None) -> SearchResult:
    """
    Run a search inside the caller's visibility, newest first.

    At most LEADS_SEARCH_MAX_RESULTS leads are returned; total is the full
    match count so callers can tell the user the list was cut short.
    """
    limit = limit or settings.LEADS_SEARCH_MAX_RESULTS
    queryset = filtered_leads(session, filters)
    total = queryset.count()
    leads = list(queryset[:limit])
    if total > limit:
        logger.info("Search for user %s truncated at %s of %s results", session.user_id, limit, total)
    return SearchResult(leads=leads, total=total, truncated=total > limit)
