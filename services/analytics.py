"""
Lead analytics.

The breakdown functions are pure: they take an already visibility-filtered
collection of leads and a reference date and never touch the database.
The report builders at the bottom load the data and call them.
"""
import logging
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from authentication.models import Role
from authentication.session import Session
from campaigns.models import RunningAd, Service
from leads.models import INDUSTRY_OPTIONS, ClientStatus, Lead
from services.access_policy import Permission, can, is_admin, require, visible_leads_predicate

logger = logging.getLogger(__name__)

STATUS_ORDER = [
    ClientStatus.INTERESTED,
    ClientStatus.NOT_INTERESTED,
    ClientStatus.BUDGET_NOT_MET,
    ClientStatus.MEETING_SCHEDULED,
    ClientStatus.NONE,
]
CONVERTED_STATUSES = (ClientStatus.INTERESTED, ClientStatus.MEETING_SCHEDULED)
TIME_SERIES_DAYS = 30
FOLLOW_UP_WINDOW_DAYS = 7
UNASSIGNED_LABEL = "Unassigned"


def _round(value: float, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def status_breakdown(leads: Iterable[Lead]) -> Dict[str, int]:
    """Count per status, including the blank "no status" bucket"""
    counts = Counter(lead.client_status or "" for lead in leads)
    return {str(status.value): counts.get(status.value, 0) for status in STATUS_ORDER}


def industry_breakdown(leads: Iterable[Lead]) -> Dict[str, int]:
    counts = Counter(lead.industry for lead in leads)
    return {industry: counts.get(industry, 0) for industry in INDUSTRY_OPTIONS}


def leads_over_time(leads: Iterable[Lead], today: date, days: int = TIME_SERIES_DAYS) -> Dict[str, int]:
    """Leads created per day for the last `days` days ending today, zero-filled"""
    counts = Counter(timezone.localtime(lead.created_at).date() for lead in leads)
    series = {}
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series[day.isoformat()] = counts.get(day, 0)
    return series


def assignment_breakdown(leads: Iterable[Lead], sales_users: Sequence) -> List[Dict]:
    """
    Lead count per sales user, with the unassigned bucket first.
    """
    counts = Counter(lead.assigned_to_id for lead in leads)
    breakdown = [{"user_id": None, "name": UNASSIGNED_LABEL, "count": counts.get(None, 0)}]
    for user in sales_users:
        breakdown.append({"user_id": user.pk, "name": user.display_name, "count": counts.get(user.pk, 0)})
    return breakdown


def conversion_rate(leads: Iterable[Lead]) -> float:
    """
    Share of contacted leads that are interested or have a meeting booked.

    A lead counts as contacted once it has any status. Rounded to one
    decimal; 0 when nothing has been contacted.
    """
    contacted = converted = 0
    for lead in leads:
        if not lead.client_status:
            continue
        contacted += 1
        if lead.client_status in CONVERTED_STATUSES:
            converted += 1
    if not contacted:
        return 0.0
    return _round(converted / contacted * 100, 1)


def is_upcoming_follow_up(follow_up: Optional[date], today: date) -> bool:
    return follow_up is not None and today <= follow_up <= today + timedelta(days=FOLLOW_UP_WINDOW_DAYS)


def is_overdue_follow_up(follow_up: Optional[date], today: date) -> bool:
    return follow_up is not None and follow_up < today


def follow_up_counts(leads: Iterable[Lead], today: date) -> Dict[str, int]:
    upcoming = overdue = 0
    for lead in leads:
        if is_upcoming_follow_up(lead.follow_up, today):
            upcoming += 1
        elif is_overdue_follow_up(lead.follow_up, today):
            overdue += 1
    return {"upcoming": upcoming, "overdue": overdue}


def days_overdue(follow_up: date, today: date) -> int:
    return (today - follow_up).days


def campaign_conversion_rate(total_leads: int, converted_leads: int) -> float:
    if not total_leads:
        return 0.0
    return _round(converted_leads / total_leads * 100, 2)


def cost_per_lead(budget, leads_count: int) -> float:
    if not leads_count:
        return 0.0
    return _round(float(budget) / leads_count, 2)


def build_report(leads: Sequence[Lead], today: date, sales_users: Optional[Sequence] = None) -> Dict:
    """Assemble the analytics page data from a visible lead set"""
    statuses = status_breakdown(leads)
    follow_ups = follow_up_counts(leads, today)
    return {
        "total_leads": len(leads),
        "status_breakdown": statuses,
        "industry_breakdown": industry_breakdown(leads),
        "leads_over_time": leads_over_time(leads, today),
        "assignment_breakdown": assignment_breakdown(leads, sales_users) if sales_users is not None else None,
        "conversion_rate": conversion_rate(leads),
        "interested": statuses[ClientStatus.INTERESTED.value],
        "meetings": statuses[ClientStatus.MEETING_SCHEDULED.value],
        "upcoming_follow_ups": follow_ups["upcoming"],
        "overdue_follow_ups": follow_ups["overdue"],
    }


def active_sales_users() -> List:
    User = get_user_model()
    return list(User.objects.filter(role=Role.SALES, is_active=True).order_by("full_name", "username"))


def analytics_report(session: Session) -> Dict:
    """Analytics for the session's visible leads. Assignment data is admin only."""
    require(session, Permission.VIEW_ANALYTICS)
    leads = list(Lead.objects.filter(visible_leads_predicate(session)).only(
        "id", "client_status", "industry", "created_at", "assigned_to", "follow_up"
    ))
    sales_users = active_sales_users() if is_admin(session) else None
    return build_report(leads, timezone.localdate(), sales_users)


def dashboard_stats(session: Session) -> Dict[str, int]:
    """Headline counts for the dashboard, over the session's visible leads"""
    today = timezone.localdate()
    leads = Lead.objects.filter(visible_leads_predicate(session))
    stats = leads.aggregate(
        total_leads=Count("id"),
        interested_leads=Count("id", filter=Q(client_status=ClientStatus.INTERESTED)),
        meeting_leads=Count("id", filter=Q(client_status=ClientStatus.MEETING_SCHEDULED)),
        not_interested_leads=Count("id", filter=Q(client_status=ClientStatus.NOT_INTERESTED)),
        pending_followups=Count(
            "id",
            filter=Q(follow_up__gte=today, follow_up__lte=today + timedelta(days=FOLLOW_UP_WINDOW_DAYS)),
        ),
        overdue_followups=Count("id", filter=Q(follow_up__lt=today)),
        this_month_leads=Count(
            "id", filter=Q(created_at__date__gte=today.replace(day=1), created_at__date__lte=today)
        ),
    )
    stats["active_campaigns"] = 0
    if can(session.role, Permission.MANAGE_ADS):
        stats["active_campaigns"] = RunningAd.objects.filter(is_active=True).count()
    return stats


def campaign_performance(active_only: bool = False) -> List[Dict]:
    """Lead counts, conversion and cost per lead for each running ad"""
    ads = RunningAd.objects.select_related("service", "assigned_sales_member").annotate(
        lead_count=Count("leads"),
        interested_leads=Count("leads", filter=Q(leads__client_status=ClientStatus.INTERESTED)),
        meeting_leads=Count("leads", filter=Q(leads__client_status=ClientStatus.MEETING_SCHEDULED)),
    )
    if active_only:
        ads = ads.filter(is_active=True)

    performance = []
    for ad in ads:
        converted = ad.interested_leads + ad.meeting_leads
        performance.append({
            "ad": ad,
            "lead_count": ad.lead_count,
            "interested_leads": ad.interested_leads,
            "meeting_leads": ad.meeting_leads,
            "conversion_rate": campaign_conversion_rate(ad.lead_count, converted),
            "cost_per_lead": cost_per_lead(ad.budget, ad.lead_count),
        })
    return performance


def service_performance() -> List[Dict]:
    """Active services ranked by how many leads selected them"""
    services = Service.objects.filter(is_active=True).annotate(
        lead_count=Count("leads", distinct=True),
        quality_leads=Count(
            "leads",
            filter=Q(leads__client_status__in=CONVERTED_STATUSES),
            distinct=True,
        ),
        running_ads_count=Count("running_ads", filter=Q(running_ads__is_active=True), distinct=True),
    ).order_by("-quality_leads", "-lead_count", "service_name")
    return [
        {
            "service": service,
            "lead_count": service.lead_count,
            "quality_leads": service.quality_leads,
            "running_ads_count": service.running_ads_count,
        }
        for service in services
    ]
