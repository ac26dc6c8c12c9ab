"""Tests for route registration and access decisions."""

from unittest.mock import MagicMock

import pytest

from sitepass.models.enums import BOARD_ROLES, SCREEN_ROLES, UserRole
from sitepass.ui.route_registry import (
    ROUTE_DASHBOARD,
    ROUTE_LANDING,
    ROUTE_LOGIN,
    ROUTE_SCREEN,
    ROUTE_SIGN_IN,
    RouteRegistry,
)


@pytest.fixture
def registry(logger):
    reg = RouteRegistry(logger=logger)
    factory = MagicMock()
    reg.register(ROUTE_LANDING, "Home", factory)
    reg.register(ROUTE_SIGN_IN, "Sign In", factory)
    reg.register(ROUTE_LOGIN, "Team leader login", factory, show_in_nav=False)
    reg.register(ROUTE_DASHBOARD, "Team Leader Dashboard", factory, BOARD_ROLES)
    reg.register(ROUTE_SCREEN, "Screen", factory, SCREEN_ROLES)
    return reg


def labels(entries):
    return [entry.label for entry in entries]


@pytest.mark.unit
def test_role_restricted_routes_require_auth(registry):
    assert registry.get_route(ROUTE_DASHBOARD).requires_auth
    assert not registry.get_route(ROUTE_SIGN_IN).requires_auth


@pytest.mark.unit
def test_unknown_route_raises(registry):
    with pytest.raises(KeyError):
        registry.get_route("reports")


@pytest.mark.unit
def test_anonymous_redirected_to_login(registry, anonymous_session):
    decision = registry.resolve(ROUTE_DASHBOARD, anonymous_session)

    assert decision.route_id == ROUTE_LOGIN
    assert not decision.allowed
    assert decision.notice == "Please log in to continue."


@pytest.mark.unit
def test_wrong_role_redirected_to_landing(registry, display_session):
    decision = registry.resolve(ROUTE_DASHBOARD, display_session)

    assert decision.route_id == ROUTE_LANDING
    assert decision.notice == "Your account does not have access to that page."


@pytest.mark.unit
def test_allowed_route_resolves_to_itself(registry, teamleader_session):
    decision = registry.resolve(ROUTE_SCREEN, teamleader_session)
    assert decision == (ROUTE_SCREEN, True, None)


@pytest.mark.unit
def test_public_routes_open_to_anyone(registry, anonymous_session):
    assert registry.resolve(ROUTE_SIGN_IN, anonymous_session).allowed


@pytest.mark.unit
def test_visible_routes_by_role(registry, anonymous_session, display_session, admin_session):
    assert labels(registry.visible_routes(anonymous_session)) == ["Home", "Sign In"]
    assert labels(registry.visible_routes(display_session)) == ["Home", "Sign In", "Screen"]
    assert labels(registry.visible_routes(admin_session)) == [
        "Home", "Sign In", "Team Leader Dashboard", "Screen",
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    "role, route_id, has_notice",
    [
        (UserRole.ADMIN, ROUTE_DASHBOARD, False),
        (UserRole.TEAMLEADER, ROUTE_DASHBOARD, False),
        (UserRole.DISPLAY, ROUTE_SCREEN, False),
        (UserRole.NEW_TEAMLEADER, ROUTE_LANDING, True),
        (None, ROUTE_LANDING, True),
    ],
)
def test_default_route_for_role(role, route_id, has_notice):
    target, notice = RouteRegistry.default_route_for(role)
    assert target == route_id
    assert (notice is not None) is has_notice


@pytest.mark.unit
def test_reregistering_overwrites(registry):
    replacement = MagicMock()
    registry.register(ROUTE_SIGN_IN, "Check in", replacement)
    assert registry.get_route(ROUTE_SIGN_IN).factory is replacement
    assert registry.get_route(ROUTE_SIGN_IN).label == "Check in"
