import pytest

from zone_attendance.core.enums import Role
from zone_attendance.core.exceptions import AuthorizationError, ValidationError
from zone_attendance.membership.model import MemberCode
from zone_attendance.membership.service import MembershipService

from conftest import InMemoryMembers, at


@pytest.fixture
def members():
    repo = InMemoryMembers()
    repo.members[("ksa", "m1")] = MemberCode(
        member_id="m1", society_id="ksa", code="KSA-0001", name="Member One",
        used=True, used_by="reg_001", used_at=at(8),
    )
    return repo


def test_admin_reset_clears_usage_and_audits(members):
    svc = MembershipService(members)

    cleared = svc.reset_usage(current_role=Role.ADMIN.value, society_id="ksa", member_id="m1", actor="admin", now=at(10))

    assert (cleared.used, cleared.used_by, cleared.used_at) == (False, None, None)
    assert members.get("ksa", "m1") == cleared
    (audit,) = svc.usage_history("ksa", "m1")
    assert audit.previous_used_by == "reg_001"
    assert audit.previous_used_at == at(8)
    assert audit.reset_by == "admin"


def test_non_admin_cannot_reset(members):
    with pytest.raises(AuthorizationError):
        MembershipService(members).reset_usage(
            current_role=Role.STAFF.value, society_id="ksa", member_id="m1", actor="staff"
        )

    assert members.get("ksa", "m1").used is True
    assert members.audits == []


def test_unknown_member(members):
    with pytest.raises(ValidationError):
        MembershipService(members).reset_usage(
            current_role=Role.ADMIN.value, society_id="ksa", member_id="nope", actor="admin"
        )
