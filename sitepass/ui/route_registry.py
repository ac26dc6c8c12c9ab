"""Route Registry.

Central registry of every view the shell can show, with the access rules
that decide whether the current session may open it.  The shell asks the
registry to resolve a route before switching; a protected route opened
without a session redirects to the team leader login, and a route the
role does not allow redirects to the landing view.

Adding a new view = one ``register()`` call + one view class.
"""

from __future__ import annotations

from typing import Callable, NamedTuple, Optional

import customtkinter as ctk

from sitepass.auth import SessionManager
from sitepass.logger import StructuredLogger
from sitepass.models.enums import UserRole

ROUTE_LANDING: str = "landing"
ROUTE_SIGN_IN: str = "sign_in"
ROUTE_SIGN_OUT: str = "sign_out"
ROUTE_LOGIN: str = "login"
ROUTE_RESET_PASSWORD: str = "reset_password"
ROUTE_DASHBOARD: str = "dashboard"
ROUTE_SCREEN: str = "screen"

ViewFactory = Callable[[ctk.CTkFrame], ctk.CTkFrame]


class RouteEntry:
    """Metadata for a single registered route.

    Attributes
    ----------
    route_id:
        Unique identifier (e.g. ``'dashboard'``).
    label:
        Text shown in the navigation bar.
    factory:
        Callable that receives the content frame and returns the view.
    required_roles:
        Roles allowed in.  Empty means any role, including none.
    requires_auth:
        Whether an authenticated session is needed.
    show_in_nav:
        Whether the navigation bar lists the route.
    """

    __slots__ = (
        "route_id",
        "label",
        "factory",
        "required_roles",
        "requires_auth",
        "show_in_nav",
    )

    def __init__(
        self,
        route_id: str,
        label: str,
        factory: ViewFactory,
        required_roles: frozenset[UserRole],
        requires_auth: bool,
        show_in_nav: bool,
    ) -> None:
        self.route_id = route_id
        self.label = label
        self.factory = factory
        self.required_roles = required_roles
        self.requires_auth = requires_auth
        self.show_in_nav = show_in_nav


class RouteDecision(NamedTuple):
    """Outcome of :meth:`RouteRegistry.resolve`.

    ``route_id`` is the route to actually show; ``notice`` explains a
    redirect to the user when there is one.
    """

    route_id: str
    allowed: bool
    notice: Optional[str] = None


class RouteRegistry:
    """Manages the collection of registered routes.

    Parameters
    ----------
    logger:
        Structured logger for registration and redirect events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        route_id: str,
        label: str,
        factory: ViewFactory,
        required_roles: frozenset[UserRole] = frozenset(),
        *,
        requires_auth: bool = False,
        show_in_nav: bool = True,
    ) -> None:
        if route_id in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", route_id)
        self._entries[route_id] = RouteEntry(
            route_id=route_id,
            label=label,
            factory=factory,
            required_roles=required_roles,
            requires_auth=requires_auth or bool(required_roles),
            show_in_nav=show_in_nav,
        )
        self._logger.info("Route registered: %s (%s)", route_id, label)

    def get_route(self, route_id: str) -> RouteEntry:
        """Raises ``KeyError`` if *route_id* is not registered."""
        if route_id not in self._entries:
            raise KeyError(f"Route '{route_id}' is not registered.")
        return self._entries[route_id]

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------

    @staticmethod
    def is_allowed(entry: RouteEntry, session: SessionManager) -> bool:
        if entry.requires_auth and not session.is_authenticated:
            return False
        if entry.required_roles and session.role not in entry.required_roles:
            return False
        return True

    def resolve(self, route_id: str, session: SessionManager) -> RouteDecision:
        """Decide which route to show when *route_id* is requested."""
        entry = self.get_route(route_id)
        if self.is_allowed(entry, session):
            return RouteDecision(route_id=route_id, allowed=True)

        if not session.is_authenticated:
            self._logger.info("Redirecting anonymous user from %s to login", route_id)
            return RouteDecision(
                route_id=ROUTE_LOGIN,
                allowed=False,
                notice="Please log in to continue.",
            )

        self._logger.warning(
            "Role %s may not open %s; redirecting to landing",
            session.role or "none", route_id,
        )
        return RouteDecision(
            route_id=ROUTE_LANDING,
            allowed=False,
            notice="Your account does not have access to that page.",
        )

    def visible_routes(self, session: SessionManager) -> list[RouteEntry]:
        """Routes shown in the navigation bar, in registration order."""
        return [
            entry
            for entry in self._entries.values()
            if entry.show_in_nav and (
                not entry.required_roles or self.is_allowed(entry, session)
            )
        ]

    @staticmethod
    def default_route_for(role: Optional[UserRole]) -> tuple[str, Optional[str]]:
        """Where to land after login, with a notice when access is pending."""
        if role in (UserRole.ADMIN, UserRole.TEAMLEADER):
            return ROUTE_DASHBOARD, None
        if role == UserRole.DISPLAY:
            return ROUTE_SCREEN, None
        return (
            ROUTE_LANDING,
            "Your account is awaiting approval by an administrator.",
        )
