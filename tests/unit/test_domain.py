"""Tests for domain entities, value objects and exceptions."""

import pytest

from app.domain import (
    AdminRecord,
    AdminRole,
    EmailAddress,
    IdentityConflictError,
    OAuthProtocolError,
    Organization,
    Principal,
    ProvisioningPartialFailure,
    SessionState,
    TenantSlug,
    ValidationException,
)


class TestTenantSlug:
    @pytest.mark.parametrize("value", ["acme", "acme-county", "a1-b2-c3", "x" * 40])
    def test_valid(self, value: str) -> None:
        assert str(TenantSlug(value)) == value

    @pytest.mark.parametrize(
        "value", ["", "Acme", "acme--county", "-acme", "acme-", "acme county", "x" * 41]
    )
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            TenantSlug(value)


class TestEmailAddress:
    def test_normalizes_case_and_whitespace(self) -> None:
        assert str(EmailAddress("  JDoe@Acme.GOV ")) == "jdoe@acme.gov"

    @pytest.mark.parametrize("value", ["", "jdoe", "@acme.gov", "jdoe@localhost"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            EmailAddress(value)


class TestAdminRecord:
    def test_org_admin_requires_organization(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            AdminRecord(uid="u1", email="a@b.gov", role=AdminRole.ORG_ADMIN)
        assert exc_info.value.details == {"field": "organization_id"}

    def test_super_admin_must_not_reference_organization(self) -> None:
        with pytest.raises(ValidationException):
            AdminRecord(
                uid="u1", email="a@b.gov", role=AdminRole.SUPER_ADMIN, organization_id="acme"
            )

    def test_can_manage(self) -> None:
        super_admin = AdminRecord(uid="u0", email="root@b.gov", role=AdminRole.SUPER_ADMIN)
        org_admin = AdminRecord(
            uid="u1", email="a@b.gov", role=AdminRole.ORG_ADMIN, organization_id="acme"
        )
        disabled = AdminRecord(
            uid="u2", email="c@b.gov", role=AdminRole.ORG_ADMIN, organization_id="acme",
            disabled=True,
        )
        assert super_admin.can_manage("anything")
        assert super_admin.is_super_admin
        assert org_admin.can_manage("acme")
        assert not org_admin.can_manage("other")
        assert not disabled.can_manage("acme")


class TestOrganization:
    def test_requires_slug_id_and_name(self) -> None:
        with pytest.raises(ValidationException):
            Organization(id="Not A Slug", name="Acme")
        with pytest.raises(ValidationException):
            Organization(id="acme", name="  ")

    def test_defaults(self) -> None:
        organization = Organization(id="acme", name="Acme")
        assert organization.arcgis_org_id is None
        assert organization.notifications == []
        assert organization.extra == {}


def test_principal_repr_hides_token() -> None:
    principal = Principal(uid="u1", email="a@b.gov", id_token="secret-token")
    assert "secret-token" not in repr(principal)


def test_session_state_terminal_states() -> None:
    assert not SessionState.LOADING.is_terminal
    assert not SessionState.PRINCIPAL_KNOWN.is_terminal
    assert SessionState.UNAUTHENTICATED.is_terminal
    assert SessionState.ACCESS_DENIED.is_terminal


def test_exception_to_dict() -> None:
    error = IdentityConflictError("Sign in instead.", reason="organization_exists")
    assert error.to_dict() == {
        "error": "IDENTITY_CONFLICT",
        "message": "Sign in instead.",
        "details": {"reason": "organization_exists"},
    }
    assert OAuthProtocolError("bad state").details == {}
    failure = ProvisioningPartialFailure(uid="u1", organization_id="acme", principal_removed=True)
    assert failure.error_code == "PROVISIONING_FAILED"
    assert failure.details["principal_removed"] is True
