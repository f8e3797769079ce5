from datetime import date, datetime
from typing import Dict, List, Optional
from ninja import Schema


class LeadInSchema(Schema):
    """Schema for creating or fully updating a lead"""
    client_name: str = ""
    required_services: str = ""
    website: str = ""
    phone: str = ""
    email: str = ""
    call_enquiry: str = ""
    mail: str = ""
    whatsapp: str = ""
    follow_up: Optional[str] = None
    client_status: str = ""
    notes: str = ""
    industry: str = ""
    assigned_to: Optional[int] = None
    lead_source: str = "Manual"
    source_ad_id: Optional[int] = None
    selected_service_ids: List[int] = []
    # Edit only: move the lead to the source ad's sales member
    confirm_auto_assign: bool = False


class FieldUpdateSchema(Schema):
    """Schema for inline single-field edits"""
    field: str
    value: Optional[str] = None


class BulkUpdateSchema(Schema):
    lead_ids: List[int]
    field: str
    value: Optional[str] = None


class AssignSchema(Schema):
    assigned_to: Optional[int] = None


class LeadFilterSchema(Schema):
    """Schema for filtering leads. Blank values and 0 are ignored."""
    search: Optional[str] = None
    status: Optional[str] = None
    industry: Optional[str] = None
    assigned_to: Optional[int] = None  # -1 = unassigned (admin only)
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    lead_source: Optional[str] = None
    has_follow_up: bool = False


class LeadResponseSchema(Schema):
    """Schema for lead response"""
    id: int
    client_name: str
    required_services: str
    website: str
    phone: str
    email: str
    call_enquiry: str
    mail: str
    whatsapp: str
    follow_up: Optional[date] = None
    client_status: str
    notes: str
    industry: str
    assigned_to_id: Optional[int] = None
    assigned_to_name: Optional[str] = None
    lead_source: str
    source_ad_id: Optional[int] = None
    source_ad_name: Optional[str] = None
    selected_service_ids: List[int] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @staticmethod
    def resolve_assigned_to_name(obj):
        return obj.assigned_to.display_name if obj.assigned_to_id else None

    @staticmethod
    def resolve_source_ad_name(obj):
        return obj.source_ad.ad_name if obj.source_ad_id else None

    @staticmethod
    def resolve_selected_service_ids(obj):
        return [service.id for service in obj.selected_services.all()]


class LeadListResponseSchema(Schema):
    count: int
    leads: List[LeadResponseSchema]


class LeadSearchResponseSchema(Schema):
    """Search results; truncated is set when total exceeds the returned rows"""
    count: int
    total: int
    truncated: bool
    leads: List[LeadResponseSchema]


class SuggestionSchema(Schema):
    id: int
    client_name: str
    email: str
    phone: str


class BulkUpdateResponseSchema(Schema):
    updated: int
    message: str


class ImportSummarySchema(Schema):
    total_rows: int
    imported: int
    skipped: int
    errors: int
    error_details: List[str]
    error_preview: List[str]
    message: str


class ImportPreviewSchema(Schema):
    headers: List[str]
    sample_rows: List[List[str]]
    total_rows: int


class DashboardStatsSchema(Schema):
    total_leads: int
    interested_leads: int
    meeting_leads: int
    not_interested_leads: int
    pending_followups: int
    overdue_followups: int
    this_month_leads: int
    active_campaigns: int


class AssignmentEntrySchema(Schema):
    user_id: Optional[int] = None
    name: str
    count: int


class AnalyticsResponseSchema(Schema):
    total_leads: int
    status_breakdown: Dict[str, int]
    industry_breakdown: Dict[str, int]
    leads_over_time: Dict[str, int]
    assignment_breakdown: Optional[List[AssignmentEntrySchema]] = None
    conversion_rate: float
    interested: int
    meetings: int
    upcoming_follow_ups: int
    overdue_follow_ups: int


class ActivityLogSchema(Schema):
    id: int
    action: str
    details: str
    user_name: Optional[str] = None
    lead_id: Optional[int] = None
    client_name: Optional[str] = None
    created_at: datetime


class FollowUpNotificationSchema(Schema):
    lead_id: int
    client_name: str
    follow_up: date
    assigned_user: Optional[str] = None
    days_overdue: Optional[int] = None


class ActivityResponseSchema(Schema):
    logs: List[ActivityLogSchema]
    total: int
    page: int
    total_pages: int
    upcoming: List[FollowUpNotificationSchema]
    overdue: List[FollowUpNotificationSchema]
