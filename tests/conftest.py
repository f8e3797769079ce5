"""
Pytest configuration and fixtures
"""
from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client

from authentication.models import Role
from authentication.session import Session
from campaigns.models import RunningAd, Service
from leads.models import Lead

User = get_user_model()


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    """bcrypt is deliberately slow; tests don't need it"""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


def make_user(username, role, full_name="", is_active=True, password="testpass123"):
    user = User.objects.create_user(
        username=username,
        password=password,
        full_name=full_name or username.title(),
        role=role,
        is_active=is_active,
    )
    return user


@pytest.fixture
def admin_user(db):
    """Create an admin user"""
    return make_user("admin", Role.ADMIN, "System Admin")


@pytest.fixture
def sales_user(db):
    """Create a sales user"""
    return make_user("john_sales", Role.SALES, "John Sales")


@pytest.fixture
def other_sales_user(db):
    return make_user("jane_sales", Role.SALES, "Jane Sales")


@pytest.fixture
def marketing_user(db):
    return make_user("mary_marketing", Role.MARKETING, "Mary Marketing")


@pytest.fixture
def admin_session(admin_user):
    return Session.from_user(admin_user)


@pytest.fixture
def sales_session(sales_user):
    return Session.from_user(sales_user)


@pytest.fixture
def other_sales_session(other_sales_user):
    return Session.from_user(other_sales_user)


@pytest.fixture
def marketing_session(marketing_user):
    return Session.from_user(marketing_user)


@pytest.fixture
def admin_client(admin_user):
    """Create an authenticated Django test client"""
    client = Client()
    client.force_login(admin_user)
    return client


@pytest.fixture
def sales_client(sales_user):
    client = Client()
    client.force_login(sales_user)
    return client


@pytest.fixture
def marketing_client(marketing_user):
    client = Client()
    client.force_login(marketing_user)
    return client


@pytest.fixture
def service(admin_user):
    return Service.objects.create(
        service_name="SEO Audit",
        service_category="Digital Marketing",
        created_by=admin_user,
    )


@pytest.fixture
def running_ad(admin_user, sales_user, service):
    """Facebook campaign whose leads belong to john_sales"""
    return RunningAd.objects.create(
        ad_name="Spring SEO Push",
        service=service,
        platform="Facebook",
        budget=1000,
        start_date=date(2024, 3, 1),
        assigned_sales_member=sales_user,
        created_by=admin_user,
    )


@pytest.fixture
def sample_lead_data():
    """Sample lead data for testing"""
    return {
        "client_name": "Acme Corp",
        "email": "contact@acme.example",
        "phone": "+1 (555) 123-4567",
        "website": "acme.example",
        "industry": "Technology",
        "client_status": "Interested",
        "follow_up": "2030-01-15",
        "notes": "Met at the expo",
    }


@pytest.fixture
def leads_for_everyone(sales_user, other_sales_user):
    """One lead per sales user plus an unassigned one"""
    return {
        "mine": Lead.objects.create(client_name="Mine Ltd", assigned_to=sales_user),
        "theirs": Lead.objects.create(client_name="Theirs Ltd", assigned_to=other_sales_user),
        "unassigned": Lead.objects.create(client_name="Nobody Ltd"),
    }


def csv_upload(content: str, name: str = "leads.csv"):
    return SimpleUploadedFile(name, content.encode("utf-8"), content_type="text/csv")


@pytest.fixture
def make_csv():
    return csv_upload
