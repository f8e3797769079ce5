"""
API tests through the Django test client
"""
import pytest
from django.test import Client

from leads.models import Lead


def login(client, username, password="testpass123"):
    return client.post(
        "/api/auth/login",
        data={"username": username, "password": password},
        content_type="application/json",
    )


@pytest.mark.django_db
class TestAuthentication:
    """Login and token handling"""

    def test_login_returns_token_and_role(self, sales_user):
        response = login(Client(), "john_sales")

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["role"] == "sales"
        assert body["access_token"]

    def test_bad_password(self, sales_user):
        response = login(Client(), "john_sales", "wrong")
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid username or password"}

    def test_deactivated_user_cannot_log_in(self, sales_user):
        sales_user.is_active = False
        sales_user.save()
        assert login(Client(), "john_sales").status_code == 401

    def test_bearer_token_authenticates(self, sales_user):
        client = Client()
        token = login(client, "john_sales").json()["access_token"]

        response = client.get("/api/auth/me", HTTP_AUTHORIZATION=f"Bearer {token}")

        assert response.status_code == 200
        assert response.json()["username"] == "john_sales"

    def test_token_of_deactivated_user_is_rejected(self, sales_user):
        client = Client()
        token = login(client, "john_sales").json()["access_token"]
        sales_user.is_active = False
        sales_user.save()

        assert client.get("/api/leads/", HTTP_AUTHORIZATION=f"Bearer {token}").status_code == 401

    def test_anonymous_requests_are_rejected(self, db):
        assert Client().get("/api/leads/").status_code == 401

    def test_session_cookie_works(self, sales_client):
        assert sales_client.get("/api/auth/me").json()["role"] == "sales"


@pytest.mark.django_db
class TestLeadEndpoints:
    """CRUD through the API"""

    def test_create_and_fetch(self, sales_client, sales_user, sample_lead_data):
        response = sales_client.post("/api/leads/", data=sample_lead_data, content_type="application/json")

        assert response.status_code == 201
        body = response.json()
        assert body["assigned_to_id"] == sales_user.id
        assert body["assigned_to_name"] == "John Sales"
        assert body["website"] == "http://acme.example"

        fetched = sales_client.get(f"/api/leads/{body['id']}")
        assert fetched.json()["client_name"] == "Acme Corp"

    def test_validation_errors_are_400(self, sales_client):
        response = sales_client.post(
            "/api/leads/", data={"client_name": "", "email": "nope"}, content_type="application/json"
        )

        assert response.status_code == 400
        assert response.json()["errors"] == ["Client name is required.", "Please enter a valid email address."]

    def test_marketing_create_is_403(self, marketing_client, sample_lead_data):
        response = marketing_client.post("/api/leads/", data=sample_lead_data, content_type="application/json")
        assert response.status_code == 403
        assert response.json() == {"error": "You do not have permission to perform this action"}

    def test_other_users_lead_is_404(self, sales_client, leads_for_everyone):
        response = sales_client.get(f"/api/leads/{leads_for_everyone['theirs'].id}")
        assert response.status_code == 404

    def test_list_is_scoped(self, sales_client, admin_client, leads_for_everyone):
        assert sales_client.get("/api/leads/").json()["count"] == 1
        assert admin_client.get("/api/leads/").json()["count"] == 3

    def test_full_update_keeps_campaign_attribution(self, sales_client, sales_user, running_ad):
        lead = Lead.objects.create(
            client_name="Ad Lead", lead_source="Facebook Ad", source_ad=running_ad, assigned_to=sales_user
        )

        response = sales_client.put(
            f"/api/leads/{lead.id}", data={"client_name": "Ad Lead 2"}, content_type="application/json"
        )

        assert response.status_code == 200
        lead.refresh_from_db()
        assert lead.client_name == "Ad Lead 2"
        assert lead.lead_source == "Facebook Ad"
        assert lead.source_ad_id == running_ad.id
        assert lead.assigned_to_id == sales_user.id

    def test_admin_full_update_keeps_assignee(self, admin_client, leads_for_everyone, sales_user):
        lead = leads_for_everyone["mine"]

        response = admin_client.put(
            f"/api/leads/{lead.id}", data={"client_name": "Mine Renamed"}, content_type="application/json"
        )

        assert response.json()["assigned_to_id"] == sales_user.id

    def test_admin_full_update_can_unassign(self, admin_client, leads_for_everyone):
        lead = leads_for_everyone["mine"]

        response = admin_client.put(
            f"/api/leads/{lead.id}",
            data={"client_name": "Mine Ltd", "assigned_to": None},
            content_type="application/json",
        )

        assert response.json()["assigned_to_id"] is None

    def test_inline_update(self, sales_client, leads_for_everyone):
        lead = leads_for_everyone["mine"]

        response = sales_client.patch(
            f"/api/leads/{lead.id}/field",
            data={"field": "client_status", "value": "Budget Not Met"},
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.json()["client_status"] == "Budget Not Met"

    def test_bulk_update(self, admin_client, leads_for_everyone):
        ids = [lead.id for lead in leads_for_everyone.values()]

        response = admin_client.post(
            "/api/leads/bulk-update",
            data={"lead_ids": ids, "field": "industry", "value": "Retail"},
            content_type="application/json",
        )

        assert response.json() == {"updated": 3, "message": "3 leads updated"}
        assert Lead.objects.filter(industry="Retail").count() == 3

    def test_assign_requires_admin(self, sales_client, other_sales_user, leads_for_everyone):
        response = sales_client.post(
            f"/api/leads/{leads_for_everyone['mine'].id}/assign",
            data={"assigned_to": other_sales_user.id},
            content_type="application/json",
        )
        assert response.status_code == 403

    def test_delete(self, admin_client, leads_for_everyone):
        lead_id = leads_for_everyone["mine"].id
        assert admin_client.delete(f"/api/leads/{lead_id}").status_code == 204
        assert admin_client.get(f"/api/leads/{lead_id}").status_code == 404

    def test_search(self, admin_client, leads_for_everyone):
        response = admin_client.post(
            "/api/leads/search", data={"assigned_to": -1}, content_type="application/json"
        )

        body = response.json()
        assert body["total"] == 1
        assert body["truncated"] is False
        assert body["leads"][0]["client_name"] == "Nobody Ltd"

    def test_suggestions(self, admin_client, leads_for_everyone):
        response = admin_client.get("/api/leads/suggestions", {"q": "ltd"})
        assert len(response.json()) == 3


@pytest.mark.django_db
class TestImportExportEndpoints:
    """CSV over HTTP"""

    def test_import(self, sales_client, make_csv):
        response = sales_client.post("/api/leads/import", {"file": make_csv("name,email\nA,a@x.com\nB,bad\n")})

        assert response.status_code == 200
        body = response.json()
        assert body["imported"] == 1
        assert body["error_preview"] == ["Row 3: Invalid email format"]

    def test_import_rejects_other_extensions(self, sales_client, make_csv):
        response = sales_client.post("/api/leads/import", {"file": make_csv("name\nA\n", name="a.txt")})
        assert response.status_code == 400
        assert response.json()["error"] == "Only CSV files are allowed."

    def test_export_streams_csv(self, admin_client, leads_for_everyone):
        response = admin_client.get("/api/leads/export")

        assert response.status_code == 200
        assert response["Content-Type"] == "text/csv"
        assert response["Content-Disposition"].startswith('attachment; filename="leads_export_')
        content = b"".join(response.streaming_content).decode()
        assert content.splitlines()[0].endswith("Assigned To")
        assert len(content.splitlines()) == 4


@pytest.mark.django_db
class TestReportingEndpoints:
    """Stats, analytics and activity"""

    def test_stats(self, sales_client, leads_for_everyone):
        assert sales_client.get("/api/leads/stats").json()["total_leads"] == 1

    def test_analytics_is_forbidden_for_sales(self, sales_client):
        assert sales_client.get("/api/leads/analytics").status_code == 403

    def test_analytics_for_marketing(self, marketing_client, leads_for_everyone):
        body = marketing_client.get("/api/leads/analytics").json()
        assert body["total_leads"] == 3
        assert len(body["leads_over_time"]) == 30

    def test_activity_feed(self, admin_client, sample_lead_data):
        admin_client.post("/api/leads/", data=sample_lead_data, content_type="application/json")

        body = admin_client.get("/api/leads/activity").json()

        assert body["total"] == 1
        assert body["logs"][0]["action"] == "create_lead"
        assert body["upcoming"] == []

    def test_activity_forbidden_for_sales(self, sales_client):
        assert sales_client.get("/api/leads/activity").status_code == 403
