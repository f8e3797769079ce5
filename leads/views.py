import logging

from django.contrib import messages
from django.http import StreamingHttpResponse
from django.shortcuts import redirect, render

from authentication.session import Session
from leads.models import INDUSTRY_OPTIONS, LEAD_SOURCES, ClientStatus
from services import csv_export
from services.access_policy import Permission, can
from services.exceptions import AuthorizationError
from services.lead_search import LeadFilters, search_leads
from services.user_service import sales_staff

logger = logging.getLogger(__name__)


def leads_view(request):
    """Lead list with search filters taken from the query string"""
    session = Session.from_user(request.user)
    filters = LeadFilters.from_params(request.GET)
    result = search_leads(session, filters)
    if result.truncated:
        messages.info(
            request,
            f'Showing the first {len(result.leads)} of {result.total} leads. Narrow your search to see the rest.',
        )
    context = {
        'leads': result.leads,
        'total': result.total,
        'filters': filters,
        'statuses': ClientStatus.choices,
        'industries': INDUSTRY_OPTIONS,
        'lead_sources': LEAD_SOURCES,
        'sales_staff': sales_staff() if can(session.role, Permission.ASSIGN_LEADS) else [],
        'can_export': can(session.role, Permission.EXPORT_LEADS),
        'show_assignee': can(session.role, Permission.VIEW_ALL_LEADS),
    }
    return render(request, 'leads/list.html', context)


def export_view(request):
    """Download the visible leads as CSV"""
    session = Session.from_user(request.user)
    try:
        lines = csv_export.export_csv_lines(session)
    except AuthorizationError as exc:
        messages.error(request, exc.message)
        return redirect('dashboard')

    response = StreamingHttpResponse(lines, content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{csv_export.export_filename()}"'
    response['Cache-Control'] = 'no-cache, must-revalidate'
    return response
