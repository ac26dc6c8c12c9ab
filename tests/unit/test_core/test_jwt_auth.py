"""Tests for role claim decoding and the role guard."""

import jwt
import pytest

from sitepass.errors import AuthorizationError
from sitepass.jwt_auth import (
    decode_access_token,
    extract_role_claim,
    normalize_role,
    require_role,
    resolve_role,
)
from sitepass.models.enums import UserRole

_KEY = "sitepass-unit-test-signing-key-0123456789"


def token(**claims) -> str:
    return jwt.encode(claims, _KEY, algorithm="HS256")


@pytest.mark.unit
def test_decode_ignores_signature_and_expiry():
    claims = decode_access_token(token(sub="u1", exp=1))
    assert claims["sub"] == "u1"


@pytest.mark.unit
@pytest.mark.parametrize("raw", [None, "", "not.a.jwt", "garbage"])
def test_decode_bad_token_is_empty(raw):
    assert decode_access_token(raw) == {}


@pytest.mark.unit
def test_extract_prefers_app_metadata():
    claims = {"app_metadata": {"app_role": "admin"}, "user_role": "display"}
    assert extract_role_claim(claims) == "admin"


@pytest.mark.unit
def test_extract_falls_back_to_top_level_claims():
    assert extract_role_claim({"app_metadata": {}, "user_role": "display"}) == "display"
    assert extract_role_claim({"app_metadata": {"app_role": "  "}}) is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("admin", UserRole.ADMIN),
        (" TeamLeader ", UserRole.TEAMLEADER),
        ("new_teamleader", UserRole.NEW_TEAMLEADER),
        ("DISPLAY", UserRole.DISPLAY),
        ("owner", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_role(raw, expected):
    assert normalize_role(raw) == expected


@pytest.mark.unit
def test_resolve_role_token_then_fallback():
    assert resolve_role(token(app_metadata={"app_role": "display"}), fallback="admin") == UserRole.DISPLAY
    assert resolve_role(token(sub="u1"), fallback="admin") == UserRole.ADMIN
    assert resolve_role(None) is None


@pytest.mark.unit
def test_require_role_needs_session(anonymous_session):
    guarded = require_role(anonymous_session)(lambda: "ok")
    with pytest.raises(AuthorizationError, match="Authentication required"):
        guarded()


@pytest.mark.unit
def test_require_role_any_authenticated(display_session):
    assert require_role(display_session)(lambda: "ok")() == "ok"


@pytest.mark.unit
def test_require_role_filters_roles(teamleader_session, admin_session):
    def delete_record(record_id):
        return record_id

    assert require_role(admin_session, UserRole.ADMIN)(delete_record)(5) == 5
    with pytest.raises(AuthorizationError):
        require_role(teamleader_session, UserRole.ADMIN)(delete_record)(5)
