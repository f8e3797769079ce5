"""
Decides who owns a lead when it is created or edited.

Leads that came in through a running ad belong to that ad's sales member.
Otherwise admins choose the assignee and sales staff own what they create.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth import get_user_model

from authentication.models import Role
from authentication.session import Session
from campaigns.models import RunningAd
from services.access_policy import is_admin
from services.exceptions import ValidationError

logger = logging.getLogger(__name__)

AD_SOURCE_SUFFIX = " Ad"


@dataclass(frozen=True)
class AssignmentDecision:
    assigned_to_id: Optional[int]
    source_ad: Optional[RunningAd]
    auto_assigned: bool = False


def is_ad_source(lead_source: Optional[str]) -> bool:
    """True for sources such as 'Facebook Ad' that come from a paid campaign"""
    return bool(lead_source) and lead_source.endswith(AD_SOURCE_SUFFIX)


def _coerce_id(value) -> Optional[int]:
    if value in (None, "", 0, "0"):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def active_sales_user_id(user_id) -> Optional[int]:
    """
    Validate a manual assignee.

    Empty input means unassigned. Anything else must be an active sales user.
    """
    user_id = _coerce_id(user_id)
    if user_id is None:
        return None
    User = get_user_model()
    if not User.objects.filter(pk=user_id, role=Role.SALES, is_active=True).exists():
        raise ValidationError(["Invalid sales person selected"])
    return user_id


def resolve_assignment(
    session: Session,
    lead_source: Optional[str],
    source_ad_id=None,
    requested_assigned_to=None,
    existing_lead=None,
    confirm_auto_assign: bool = False,
) -> AssignmentDecision:
    """
    Work out the assignee and source ad for a lead being saved.

    Rules, first match wins:
      1. non-admins editing an existing lead never change its owner
      2. an ad-derived source with an existing ad goes to the ad's sales
         member (on edit only when the caller confirmed the reassignment)
      3. admins get their manual selection, or unassigned
      4. sales staff own the lead themselves
    """
    ad = None
    ad_id = _coerce_id(source_ad_id)
    if ad_id is not None:
        ad = RunningAd.objects.filter(pk=ad_id).select_related("assigned_sales_member").first()
        if ad is None:
            logger.info("Source ad %s no longer exists, falling back to manual assignment", ad_id)

    editing = existing_lead is not None

    if editing and not is_admin(session):
        return AssignmentDecision(existing_lead.assigned_to_id, ad)

    if ad is not None and is_ad_source(lead_source) and (not editing or confirm_auto_assign):
        logger.info(
            "Lead auto-assigned to user %s from ad %s", ad.assigned_sales_member_id, ad.pk
        )
        return AssignmentDecision(ad.assigned_sales_member_id, ad, auto_assigned=True)

    if is_admin(session):
        # An unchanged owner stays even if that account has since been deactivated
        if editing and _coerce_id(requested_assigned_to) == existing_lead.assigned_to_id:
            return AssignmentDecision(existing_lead.assigned_to_id, ad)
        return AssignmentDecision(active_sales_user_id(requested_assigned_to), ad)

    return AssignmentDecision(session.user_id, ad)
