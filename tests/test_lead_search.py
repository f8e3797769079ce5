"""
Tests for lead search and filters
"""
from datetime import date, timedelta

import pytest
from django.utils import timezone

from leads.models import Lead
from services.lead_search import UNASSIGNED, LeadFilters, search_leads


class TestLeadFilters:
    """Parsing filter parameters"""

    def test_blank_params_mean_no_filters(self):
        filters = LeadFilters.from_params({"search": "  ", "status": "", "assigned_to": "0", "has_follow_up": "false"})
        assert filters.is_empty()

    def test_parses_values(self):
        filters = LeadFilters.from_params({
            "search": " acme ",
            "assigned_to": "-1",
            "date_from": "2024-01-01",
            "date_to": "not a date",
            "has_follow_up": "1",
        })

        assert filters.search == "acme"
        assert filters.assigned_to == UNASSIGNED
        assert filters.date_from == date(2024, 1, 1)
        assert filters.date_to is None
        assert filters.has_follow_up is True

    def test_bad_assignee_is_ignored(self):
        assert LeadFilters.from_params({"assigned_to": "john"}).assigned_to is None


@pytest.fixture
def catalogue(sales_user, other_sales_user):
    return [
        Lead.objects.create(
            client_name="Acme Corp", email="hello@acme.example", client_status="Interested",
            industry="Technology", assigned_to=sales_user, follow_up=date(2030, 1, 1),
        ),
        Lead.objects.create(
            client_name="Bolt Retail", phone="555-0199", client_status="Not Interested",
            industry="Retail", assigned_to=other_sales_user, lead_source="Referral",
        ),
        Lead.objects.create(
            client_name="Cedar Clinic", required_services="SEO audit", industry="Healthcare",
        ),
    ]


def names(result):
    return sorted(lead.client_name for lead in result.leads)


@pytest.mark.django_db
class TestSearchLeads:
    """Searching inside the caller's visibility"""

    def test_no_filters_returns_everything_visible(self, admin_session, sales_session, catalogue):
        assert names(search_leads(admin_session, LeadFilters())) == ["Acme Corp", "Bolt Retail", "Cedar Clinic"]
        assert names(search_leads(sales_session, LeadFilters())) == ["Acme Corp"]

    @pytest.mark.parametrize("term,expected", [
        ("acme.example", ["Acme Corp"]),
        ("0199", ["Bolt Retail"]),
        ("seo", ["Cedar Clinic"]),
        ("CLINIC", ["Cedar Clinic"]),
    ])
    def test_free_text(self, admin_session, catalogue, term, expected):
        assert names(search_leads(admin_session, LeadFilters(search=term))) == expected

    def test_status_industry_and_source(self, admin_session, catalogue):
        assert names(search_leads(admin_session, LeadFilters(status="Interested"))) == ["Acme Corp"]
        assert names(search_leads(admin_session, LeadFilters(industry="Healthcare"))) == ["Cedar Clinic"]
        assert names(search_leads(admin_session, LeadFilters(lead_source="Referral"))) == ["Bolt Retail"]

    def test_has_follow_up(self, admin_session, catalogue):
        assert names(search_leads(admin_session, LeadFilters(has_follow_up=True))) == ["Acme Corp"]

    def test_admin_assignee_filters(self, admin_session, other_sales_user, catalogue):
        assert names(search_leads(admin_session, LeadFilters(assigned_to=other_sales_user.id))) == ["Bolt Retail"]
        assert names(search_leads(admin_session, LeadFilters(assigned_to=UNASSIGNED))) == ["Cedar Clinic"]

    def test_assignee_filter_ignored_for_non_admins(self, sales_session, marketing_session, other_sales_user, catalogue):
        filters = LeadFilters(assigned_to=other_sales_user.id)
        assert names(search_leads(sales_session, filters)) == ["Acme Corp"]
        assert len(search_leads(marketing_session, filters).leads) == 3

    def test_created_date_range(self, admin_session, catalogue):
        old = catalogue[2]
        Lead.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))
        since = timezone.localdate() - timedelta(days=7)

        assert names(search_leads(admin_session, LeadFilters(date_from=since))) == ["Acme Corp", "Bolt Retail"]
        assert names(search_leads(admin_session, LeadFilters(date_to=since))) == ["Cedar Clinic"]

    def test_results_are_capped(self, admin_session, catalogue):
        result = search_leads(admin_session, LeadFilters(), limit=2)

        assert len(result.leads) == 2
        assert result.total == 3
        assert result.truncated

    def test_cap_comes_from_settings(self, admin_session, catalogue, settings):
        settings.LEADS_SEARCH_MAX_RESULTS = 5
        result = search_leads(admin_session, LeadFilters())
        assert not result.truncated
