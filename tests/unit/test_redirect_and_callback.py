"""Tests for RedirectInitiator, parse_callback and CallbackVerifier."""

from urllib.parse import parse_qs, urlparse

import pytest

from app.application.dtos.identity import CallbackParams
from app.application.services.callback_verifier import CallbackVerifier, parse_callback
from app.application.services.redirect_initiator import (
    OAUTH_CLIENT_ID_KEY,
    OAUTH_MODE_KEY,
    OAUTH_STATE_KEY,
    SIGNUP_TARGET_ORG_KEY,
    RedirectInitiator,
)
from app.domain.enums import OAuthMode
from app.domain.exceptions import OAuthProtocolError, ValidationException
from tests.fakes import FakeIdentityProvider


@pytest.fixture
def store() -> dict[str, str]:
    return {}


@pytest.fixture
def initiator(store: dict[str, str]) -> RedirectInitiator:
    return RedirectInitiator(FakeIdentityProvider(), store)


def test_begin_persists_state_and_mode_and_returns_provider_url(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    url = initiator.begin(OAuthMode.SIGNUP)
    query = parse_qs(urlparse(url).query)
    assert query["state"] == [store[OAUTH_STATE_KEY]]
    assert query["mode"] == ["signup"]
    assert store[OAUTH_MODE_KEY] == "signup"
    assert len(store[OAUTH_STATE_KEY]) >= 32
    assert OAUTH_CLIENT_ID_KEY not in store
    assert SIGNUP_TARGET_ORG_KEY not in store


def test_begin_generates_fresh_state_each_time(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    initiator.begin("signin")
    first = store[OAUTH_STATE_KEY]
    initiator.begin("signin")
    assert store[OAUTH_STATE_KEY] != first


def test_begin_stashes_client_id_and_deep_link_target(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    url = initiator.begin("signup", client_id="county-app", target_organization="acme-county")
    assert store[OAUTH_CLIENT_ID_KEY] == "county-app"
    assert store[SIGNUP_TARGET_ORG_KEY] == "acme-county"
    assert "client_id=county-app" in url


def test_begin_rejects_unknown_mode_and_bad_target(initiator: RedirectInitiator) -> None:
    with pytest.raises(ValidationException):
        initiator.begin("register")
    with pytest.raises(ValidationException):
        initiator.begin("signup", target_organization="Not A Slug!")


def test_parse_callback_reads_known_parameters() -> None:
    params = parse_callback(
        {"code": "abc", "state": "s1", "error": "", "error_description": "", "other": "x"}
    )
    assert params == CallbackParams(code="abc", state="s1")
    assert params.is_callback
    assert not parse_callback({}).is_callback


def test_verify_success_returns_code_mode_and_consumes_stored_request(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    initiator.begin("signup", client_id="county-app", target_organization="acme-county")
    state = store[OAUTH_STATE_KEY]
    verified = CallbackVerifier(store).verify(CallbackParams(code="abc", state=state))
    assert verified.code == "abc"
    assert verified.mode == OAuthMode.SIGNUP
    assert verified.client_id == "county-app"
    assert verified.target_organization == "acme-county"
    assert store == {}

    # Replaying the same callback fails: the stored state was consumed.
    with pytest.raises(OAuthProtocolError):
        CallbackVerifier(store).verify(CallbackParams(code="abc", state=state))


def test_verify_state_mismatch_is_protocol_error(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    initiator.begin("signin")
    with pytest.raises(OAuthProtocolError):
        CallbackVerifier(store).verify(CallbackParams(code="abc", state="forged"))
    assert OAUTH_STATE_KEY not in store


def test_verify_missing_stored_state_is_protocol_error(store: dict[str, str]) -> None:
    with pytest.raises(OAuthProtocolError):
        CallbackVerifier(store).verify(CallbackParams(code="abc", state="whatever"))


def test_verify_missing_returned_state_is_protocol_error(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    initiator.begin("signin")
    with pytest.raises(OAuthProtocolError):
        CallbackVerifier(store).verify(CallbackParams(code="abc"))


def test_verify_provider_error_surfaces_description(
    initiator: RedirectInitiator, store: dict[str, str]
) -> None:
    initiator.begin("signin")
    with pytest.raises(OAuthProtocolError) as exc_info:
        CallbackVerifier(store).verify(
            CallbackParams(error="access_denied", error_description="The user denied your request.")
        )
    assert exc_info.value.message == "The user denied your request."
    assert exc_info.value.details == {"provider_error": "access_denied"}
    assert store == {}


def test_verify_missing_mode_defaults_to_signin(store: dict[str, str]) -> None:
    store[OAUTH_STATE_KEY] = "s1"
    verified = CallbackVerifier(store).verify(CallbackParams(code="abc", state="s1"))
    assert verified.mode == OAuthMode.SIGNIN


def test_verify_non_ascii_state_is_rejected_not_crashing(store: dict[str, str]) -> None:
    store[OAUTH_STATE_KEY] = "s1"
    with pytest.raises(OAuthProtocolError):
        CallbackVerifier(store).verify(CallbackParams(code="abc", state="sé"))
