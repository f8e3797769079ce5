"""
Tests for the role permission table and lead visibility
"""
import pytest

from authentication.session import Session
from leads.models import Lead
from services.access_policy import (
    Permission,
    ROLE_PERMISSIONS,
    can,
    require,
    visible_leads_predicate,
)
from services.exceptions import AuthorizationError


class TestPermissionTable:
    """The role/permission matrix"""

    def test_admin_holds_every_permission(self):
        for permission in Permission:
            assert can("admin", permission)

    @pytest.mark.parametrize("permission,expected", [
        (Permission.VIEW_ALL_LEADS, False),
        (Permission.EDIT_LEADS, True),
        (Permission.ADD_LEADS, True),
        (Permission.DELETE_LEADS, False),
        (Permission.VIEW_ANALYTICS, False),
        (Permission.EXPORT_LEADS, True),
        (Permission.MANAGE_USERS, False),
        (Permission.ASSIGN_LEADS, False),
    ])
    def test_sales(self, permission, expected):
        assert can("sales", permission) is expected

    @pytest.mark.parametrize("permission,expected", [
        (Permission.VIEW_ALL_LEADS, True),
        (Permission.EDIT_LEADS, False),
        (Permission.ADD_LEADS, False),
        (Permission.DELETE_LEADS, False),
        (Permission.VIEW_ANALYTICS, True),
        (Permission.EXPORT_LEADS, True),
        (Permission.MANAGE_USERS, False),
        (Permission.MANAGE_ADS, True),
    ])
    def test_marketing(self, permission, expected):
        assert can("marketing", permission) is expected

    def test_unknown_role_has_nothing(self):
        assert not any(can("intern", permission) for permission in Permission)
        assert not can("", Permission.EXPORT_LEADS)

    def test_every_role_has_an_entry(self):
        assert {role.value for role in ROLE_PERMISSIONS} == {"admin", "sales", "marketing"}

    def test_require_raises(self):
        with pytest.raises(AuthorizationError):
            require(Session(user_id=1, role="marketing"), Permission.DELETE_LEADS)
        require(Session(user_id=1, role="admin"), Permission.DELETE_LEADS)


@pytest.mark.django_db
class TestVisibility:
    """Who sees which leads"""

    def visible_names(self, session):
        return set(
            Lead.objects.filter(visible_leads_predicate(session)).values_list("client_name", flat=True)
        )

    def test_sales_sees_only_own_leads(self, sales_session, leads_for_everyone):
        assert self.visible_names(sales_session) == {"Mine Ltd"}

    def test_admin_and_marketing_see_everything(self, admin_session, marketing_session, leads_for_everyone):
        everything = {"Mine Ltd", "Theirs Ltd", "Nobody Ltd"}
        assert self.visible_names(admin_session) == everything
        assert self.visible_names(marketing_session) == everything

    def test_unknown_role_sees_nothing(self, leads_for_everyone):
        assert self.visible_names(Session(user_id=999, role="guest")) == set()
