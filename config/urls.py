"""
URL configuration for the Lead Management System.
"""
import logging

from django.contrib import admin
from django.contrib.auth.decorators import login_required
from django.shortcuts import render
from django.urls import path
from ninja import NinjaAPI

from authentication.api import router as auth_router
from authentication.session import Session
from authentication.views import login_view, logout_view
from campaigns.api import router as campaigns_router
from leads.api import router as leads_router
from leads.views import export_view, leads_view
from services import activity_logger, analytics
from services.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Create NinjaAPI instance
api = NinjaAPI(
    title="Lead Management API",
    description="Role-based lead management: leads, CSV import/export, campaigns and analytics",
    version="2.0.0",
)

# Register API routers
api.add_router("/auth", auth_router, tags=["Authentication"])
api.add_router("/leads", leads_router, tags=["Leads"])
api.add_router("/campaigns", campaigns_router, tags=["Campaigns"])


@api.exception_handler(AuthorizationError)
def on_authorization_error(request, exc):
    return api.create_response(request, {"error": exc.message}, status=403)


@api.exception_handler(NotFoundError)
def on_not_found(request, exc):
    return api.create_response(request, {"error": exc.message}, status=404)


@api.exception_handler(ValidationError)
def on_validation_error(request, exc):
    return api.create_response(request, {"error": exc.message, "errors": exc.errors}, status=400)


@api.exception_handler(PersistenceError)
def on_persistence_error(request, exc):
    # Details are already in the log; the client only gets the generic message
    return api.create_response(request, {"error": PersistenceError.default_message}, status=500)


def dashboard_view(request):
    """Dashboard view"""
    session = Session.from_user(request.user)
    context = {
        "stats": analytics.dashboard_stats(session),
        "recent_leads": activity_logger.recent_lead_activity(session),
    }
    return render(request, "dashboard.html", context)


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", api.urls),
    # Frontend auth routes
    path("auth/login/", login_view, name="login"),
    path("auth/logout/", logout_view, name="logout"),
    # Dashboard
    path("", login_required(dashboard_view), name="dashboard"),
    # Leads
    path("leads/", login_required(leads_view), name="leads"),
    path("leads/export/", login_required(export_view), name="leads_export"),
]
