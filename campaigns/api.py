from typing import List

from ninja import Router
from ninja.security import django_auth

from authentication.jwt_auth import jwt_auth
from authentication.session import session_from_request
from campaigns.schemas import (
    AdPerformanceSchema,
    AdResponseSchema,
    CreateAdSchema,
    CreateServiceSchema,
    ServicePerformanceSchema,
    ServiceResponseSchema,
)
from services import campaign_service


router = Router(auth=[jwt_auth, django_auth])


@router.get("/services", response=List[ServiceResponseSchema])
def list_services(request, include_inactive: bool = False):
    """
    List catalog services

    Everyone gets the active catalog. include_inactive returns every
    service with usage counts and needs the manage_services permission.
    """
    session = session_from_request(request)
    return campaign_service.list_services(session, active_only=not include_inactive)


@router.post("/services", response={201: ServiceResponseSchema})
def create_service(request, data: CreateServiceSchema):
    service = campaign_service.create_service(session_from_request(request), data.dict())
    return 201, service


@router.get("/services/performance", response=List[ServicePerformanceSchema])
def service_performance(request):
    """Active services with lead counts, best converting first"""
    return campaign_service.service_report(session_from_request(request))


@router.post("/services/{int:service_id}/toggle", response=ServiceResponseSchema)
def toggle_service(request, service_id: int):
    return campaign_service.toggle_service(session_from_request(request), service_id)


@router.get("/ads", response=List[AdPerformanceSchema])
def list_ads(request, active_only: bool = False):
    """Running ads with lead counts, conversion rate and cost per lead"""
    return campaign_service.list_ads(session_from_request(request), active_only=active_only)


@router.post("/ads", response={201: AdResponseSchema})
def create_ad(request, data: CreateAdSchema):
    """
    Create a running ad

    Leads captured from this ad are auto-assigned to assigned_sales_member.
    """
    ad = campaign_service.create_ad(session_from_request(request), data.dict())
    return 201, ad


@router.post("/ads/{int:ad_id}/toggle", response=AdResponseSchema)
def toggle_ad(request, ad_id: int):
    return campaign_service.toggle_ad(session_from_request(request), ad_id)
