from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from ninja import Schema


class CreateServiceSchema(Schema):
    """Schema for adding a service to the catalog"""
    service_name: str = ""
    service_category: str = ""
    description: str = ""


class ServiceResponseSchema(Schema):
    """Schema for service response"""
    id: int
    service_name: str
    service_category: str
    description: str
    is_active: bool
    created_at: datetime
    running_ads_count: Optional[int] = None
    leads_count: Optional[int] = None

    class Config:
        from_attributes = True


class ServicePerformanceSchema(Schema):
    service: ServiceResponseSchema
    lead_count: int
    quality_leads: int
    running_ads_count: int


class CreateAdSchema(Schema):
    """Schema for creating a running ad"""
    ad_name: str = ""
    service_id: Optional[int] = None
    platform: str = ""
    budget: Optional[Decimal] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    target_audience: str = ""
    ad_copy: str = ""
    assigned_sales_member: Optional[int] = None  # sales user who owns the ad's leads


class AdResponseSchema(Schema):
    """Schema for running ad response"""
    id: int
    ad_name: str
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    platform: str
    budget: Decimal
    start_date: date
    end_date: Optional[date] = None
    target_audience: str
    ad_copy: str
    assigned_sales_member_id: int
    assigned_sales_name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

    @staticmethod
    def resolve_service_name(obj):
        return obj.service.service_name if obj.service_id else None

    @staticmethod
    def resolve_assigned_sales_name(obj):
        return obj.assigned_sales_member.display_name


class AdPerformanceSchema(Schema):
    """Running ad with its lead statistics"""
    ad: AdResponseSchema
    lead_count: int
    interested_leads: int
    meeting_leads: int
    conversion_rate: float
    cost_per_lead: float
