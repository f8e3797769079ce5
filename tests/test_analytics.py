"""
Tests for analytics and dashboard numbers
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone

from campaigns.models import RunningAd
from leads.models import Lead
from services.analytics import (
    analytics_report,
    assignment_breakdown,
    campaign_conversion_rate,
    campaign_performance,
    conversion_rate,
    cost_per_lead,
    dashboard_stats,
    days_overdue,
    follow_up_counts,
    industry_breakdown,
    is_overdue_follow_up,
    is_upcoming_follow_up,
    leads_over_time,
    status_breakdown,
)
from services.exceptions import AuthorizationError

TODAY = date(2024, 6, 15)


def lead(status="", industry="", follow_up=None, created=None, assigned_to_id=None):
    created = created or datetime(2024, 6, 15, 12, 0)
    return SimpleNamespace(
        client_status=status,
        industry=industry,
        follow_up=follow_up,
        created_at=timezone.make_aware(created),
        assigned_to_id=assigned_to_id,
    )


class TestBreakdowns:
    """Pure breakdown functions"""

    def test_status_breakdown_includes_every_status(self):
        breakdown = status_breakdown([lead("Interested"), lead("Interested"), lead("")])
        assert breakdown == {
            "Interested": 2,
            "Not Interested": 0,
            "Budget Not Met": 0,
            "Meeting Scheduled": 0,
            "": 1,
        }

    def test_industry_breakdown_ignores_unknown(self):
        breakdown = industry_breakdown([lead(industry="Retail"), lead(industry="Space Mining")])
        assert breakdown["Retail"] == 1
        assert "Space Mining" not in breakdown
        assert breakdown["Technology"] == 0

    def test_leads_over_time_is_zero_filled(self):
        series = leads_over_time(
            [lead(created=datetime(2024, 6, 15, 9)), lead(created=datetime(2024, 6, 1, 9)),
             lead(created=datetime(2024, 4, 1, 9))],
            TODAY,
        )

        assert len(series) == 30
        assert list(series)[0] == "2024-05-17"
        assert list(series)[-1] == "2024-06-15"
        assert series["2024-06-15"] == 1
        assert series["2024-06-01"] == 1
        assert sum(series.values()) == 2

    def test_assignment_breakdown(self):
        users = [SimpleNamespace(pk=5, display_name="John Sales"), SimpleNamespace(pk=6, display_name="Jane")]
        breakdown = assignment_breakdown([lead(assigned_to_id=5), lead(), lead()], users)
        assert breakdown == [
            {"user_id": None, "name": "Unassigned", "count": 2},
            {"user_id": 5, "name": "John Sales", "count": 1},
            {"user_id": 6, "name": "Jane", "count": 0},
        ]


class TestRates:
    """Conversion and cost figures"""

    def test_conversion_rate_counts_contacted_leads_only(self):
        leads = [lead("Interested"), lead("Not Interested"), lead("Meeting Scheduled"), lead("Budget Not Met"), lead("")]
        assert conversion_rate(leads) == 50.0

    def test_conversion_rate_rounds_to_one_place(self):
        assert conversion_rate([lead("Interested"), lead("Not Interested"), lead("Not Interested")]) == 33.3

    def test_conversion_rate_without_contacts(self):
        assert conversion_rate([lead(""), lead("")]) == 0.0
        assert conversion_rate([]) == 0.0

    def test_campaign_figures(self):
        assert campaign_conversion_rate(3, 2) == 66.67
        assert campaign_conversion_rate(0, 0) == 0.0
        assert cost_per_lead(Decimal("1000.00"), 3) == 333.33
        assert cost_per_lead(Decimal("1000.00"), 0) == 0.0


class TestFollowUps:
    """Upcoming and overdue boundaries"""

    @pytest.mark.parametrize("offset,upcoming,overdue", [
        (-1, False, True),
        (0, True, False),
        (7, True, False),
        (8, False, False),
    ])
    def test_boundaries(self, offset, upcoming, overdue):
        follow_up = TODAY + timedelta(days=offset)
        assert is_upcoming_follow_up(follow_up, TODAY) is upcoming
        assert is_overdue_follow_up(follow_up, TODAY) is overdue

    def test_no_follow_up_is_neither(self):
        assert not is_upcoming_follow_up(None, TODAY)
        assert not is_overdue_follow_up(None, TODAY)

    def test_counts(self):
        leads = [lead(follow_up=TODAY), lead(follow_up=TODAY - timedelta(days=3)), lead()]
        assert follow_up_counts(leads, TODAY) == {"upcoming": 1, "overdue": 1}

    def test_days_overdue(self):
        assert days_overdue(TODAY - timedelta(days=1), TODAY) == 1


@pytest.mark.django_db
class TestReports:
    """Reports over stored leads"""

    def test_sales_cannot_see_analytics(self, sales_session):
        with pytest.raises(AuthorizationError):
            analytics_report(sales_session)

    def test_admin_report_includes_assignment(self, admin_session, leads_for_everyone):
        report = analytics_report(admin_session)

        assert report["total_leads"] == 3
        assert report["assignment_breakdown"][0] == {"user_id": None, "name": "Unassigned", "count": 1}
        assert {entry["name"] for entry in report["assignment_breakdown"]} == {
            "Unassigned", "John Sales", "Jane Sales"
        }

    def test_marketing_report_has_no_assignment(self, marketing_session, leads_for_everyone):
        report = analytics_report(marketing_session)
        assert report["total_leads"] == 3
        assert report["assignment_breakdown"] is None

    def test_dashboard_stats_follow_visibility(self, sales_session, admin_session, sales_user, other_sales_user):
        today = timezone.localdate()
        Lead.objects.create(client_name="A", assigned_to=sales_user, client_status="Interested", follow_up=today)
        Lead.objects.create(
            client_name="B", assigned_to=sales_user, client_status="Meeting Scheduled",
            follow_up=today - timedelta(days=2),
        )
        Lead.objects.create(client_name="C", assigned_to=other_sales_user, client_status="Not Interested")

        mine = dashboard_stats(sales_session)
        everything = dashboard_stats(admin_session)

        assert mine["total_leads"] == 2
        assert mine["interested_leads"] == 1
        assert mine["meeting_leads"] == 1
        assert mine["pending_followups"] == 1
        assert mine["overdue_followups"] == 1
        assert mine["this_month_leads"] == 2
        assert mine["active_campaigns"] == 0
        assert everything["total_leads"] == 3
        assert everything["not_interested_leads"] == 1

    def test_active_campaigns_for_ad_managers(self, marketing_session, running_ad):
        assert dashboard_stats(marketing_session)["active_campaigns"] == 1

    def test_campaign_performance(self, running_ad):
        Lead.objects.create(client_name="A", source_ad=running_ad, client_status="Interested")
        Lead.objects.create(client_name="B", source_ad=running_ad, client_status="Meeting Scheduled")
        Lead.objects.create(client_name="C", source_ad=running_ad)
        Lead.objects.create(client_name="D", source_ad=running_ad, client_status="Not Interested")

        [entry] = campaign_performance()

        assert entry["ad"] == running_ad
        assert entry["lead_count"] == 4
        assert entry["conversion_rate"] == 50.0
        assert entry["cost_per_lead"] == 250.0

    def test_campaign_performance_active_only(self, running_ad):
        RunningAd.objects.filter(pk=running_ad.pk).update(is_active=False)
        assert campaign_performance(active_only=True) == []
