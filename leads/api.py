from typing import List, Optional

from django.http import StreamingHttpResponse
from ninja import File, Form, Router
from ninja.files import UploadedFile
from ninja.security import django_auth

from authentication.jwt_auth import jwt_auth
from authentication.session import session_from_request
from leads.schemas import (
    ActivityResponseSchema,
    AnalyticsResponseSchema,
    AssignSchema,
    BulkUpdateResponseSchema,
    BulkUpdateSchema,
    DashboardStatsSchema,
    FieldUpdateSchema,
    ImportPreviewSchema,
    ImportSummarySchema,
    LeadFilterSchema,
    LeadInSchema,
    LeadListResponseSchema,
    LeadResponseSchema,
    LeadSearchResponseSchema,
    SuggestionSchema,
)
from services import activity_logger, analytics, csv_export, csv_import, lead_repository
from services.lead_search import LeadFilters, search_leads


router = Router(auth=[jwt_auth, django_auth])


@router.get("/", response=LeadListResponseSchema)
def list_leads(request):
    """List the leads visible to the caller, newest first"""
    session = session_from_request(request)
    leads = list(lead_repository.visible_leads(session).prefetch_related("selected_services"))
    return {"count": len(leads), "leads": leads}


@router.post("/", response={201: LeadResponseSchema})
def create_lead(request, data: LeadInSchema):
    session = session_from_request(request)
    lead = lead_repository.create(session, data.dict())
    return 201, lead


@router.post("/search", response=LeadSearchResponseSchema)
def search(request, filters: LeadFilterSchema):
    """
    Filter leads

    Empty criteria are ignored; with no criteria every visible lead matches.
    Results are capped and `truncated` reports when the cap was hit.
    """
    session = session_from_request(request)
    result = search_leads(session, LeadFilters.from_params(filters.dict()))
    return {
        "count": len(result.leads),
        "total": result.total,
        "truncated": result.truncated,
        "leads": result.leads,
    }


@router.get("/suggestions", response=List[SuggestionSchema])
def suggestions(request, q: str = ""):
    """Autocomplete on client name, email and phone (2+ characters)"""
    return lead_repository.suggest(session_from_request(request), q)


@router.get("/stats", response=DashboardStatsSchema)
def stats(request):
    """Get dashboard statistics"""
    return analytics.dashboard_stats(session_from_request(request))


@router.get("/analytics", response=AnalyticsResponseSchema)
def analytics_report(request):
    return analytics.analytics_report(session_from_request(request))


@router.get("/activity", response=ActivityResponseSchema)
def activity(request, page: int = 1):
    """Activity feed plus upcoming and overdue follow-ups"""
    session = session_from_request(request)
    feed = activity_logger.get_activity_logs(session, page=page)
    feed.update(activity_logger.follow_up_notifications(session))
    return feed


@router.get("/export")
def export_leads(request):
    """Download the visible leads as CSV"""
    session = session_from_request(request)
    response = StreamingHttpResponse(csv_export.export_csv_lines(session), content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{csv_export.export_filename()}"'
    response["Cache-Control"] = "no-cache, must-revalidate"
    return response


@router.post("/import", response=ImportSummarySchema)
def import_leads(
    request,
    file: UploadedFile = File(...),
    default_assigned_to: Optional[int] = Form(None),
):
    """
    Import leads from a CSV upload

    Admins may pass default_assigned_to (a sales user id) for the batch.
    """
    session = session_from_request(request)
    summary = csv_import.import_leads_csv(session, file, default_assigned_to)
    return summary.as_dict()


@router.post("/import/preview", response=ImportPreviewSchema)
def import_preview(request, file: UploadedFile = File(...)):
    return csv_import.preview_csv(session_from_request(request), file)


@router.post("/bulk-update", response=BulkUpdateResponseSchema)
def bulk_update(request, data: BulkUpdateSchema):
    session = session_from_request(request)
    updated = lead_repository.bulk_update_field(session, data.lead_ids, data.field, data.value)
    return {"updated": updated, "message": f"{updated} leads updated"}


@router.get("/{int:lead_id}", response=LeadResponseSchema)
def get_lead(request, lead_id: int):
    session = session_from_request(request)
    return lead_repository.get_by_id(session, lead_id)


@router.put("/{int:lead_id}", response=LeadResponseSchema)
def update_lead(request, lead_id: int, data: LeadInSchema):
    session = session_from_request(request)
    # Omitted source, ad, assignee and services keep their current values
    payload = data.dict(exclude_unset=True)
    confirm = payload.pop("confirm_auto_assign", False)
    lead = lead_repository.update(session, lead_id, payload, confirm_auto_assign=confirm)
    return lead


@router.patch("/{int:lead_id}/field", response=LeadResponseSchema)
def update_field(request, lead_id: int, data: FieldUpdateSchema):
    """Inline edit of follow_up, client_status, notes or industry"""
    session = session_from_request(request)
    lead = lead_repository.update_field(session, lead_id, data.field, data.value)
    return lead


@router.post("/{int:lead_id}/assign", response=LeadResponseSchema)
def assign_lead(request, lead_id: int, data: AssignSchema):
    session = session_from_request(request)
    lead = lead_repository.assign(session, lead_id, data.assigned_to)
    return lead


@router.delete("/{int:lead_id}", response={204: None})
def delete_lead(request, lead_id: int):
    lead_repository.delete(session_from_request(request), lead_id)
    return 204, None
