from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .models import Role, Session

logger = logging.getLogger(__name__)


class Route(str, Enum):
    LOGIN = "login"
    REGISTER = "register"
    HOME = "home"
    ADMIN_HOME = "admin-dashboard"
    SELLER_HOME = "vendeur-dashboard"
    CUSTOMER_HOME = "client-dashboard"
    CLIENTS = "clients"
    PRODUCTS = "produits"
    ORDERS = "factures"
    ORDER_CREATE = "factures/create"


@dataclass(frozen=True)
class RouteSpec:
    route: Route
    required_roles: frozenset[Role] = frozenset()
    public: bool = False


ROUTE_SPECS: dict[Route, RouteSpec] = {
    spec.route: spec
    for spec in (
        RouteSpec(Route.LOGIN, public=True),
        RouteSpec(Route.REGISTER, public=True),
        RouteSpec(Route.HOME, public=True),
        RouteSpec(Route.ADMIN_HOME, frozenset({Role.ADMIN})),
        RouteSpec(Route.SELLER_HOME, frozenset({Role.SELLER})),
        RouteSpec(Route.CUSTOMER_HOME, frozenset({Role.CUSTOMER})),
        RouteSpec(Route.CLIENTS, frozenset({Role.ADMIN, Role.SELLER})),
        RouteSpec(Route.PRODUCTS, frozenset({Role.ADMIN, Role.SELLER})),
        RouteSpec(Route.ORDERS, frozenset({Role.ADMIN, Role.SELLER, Role.CUSTOMER})),
        # Admins review orders but never create them.
        RouteSpec(Route.ORDER_CREATE, frozenset({Role.SELLER, Role.CUSTOMER})),
    )
}

_HOME_BY_ROLE = {
    Role.ADMIN: Route.ADMIN_HOME,
    Role.SELLER: Route.SELLER_HOME,
    Role.CUSTOMER: Route.CUSTOMER_HOME,
}


@dataclass(frozen=True)
class RouteDecision:
    allowed: bool
    redirect: Route | None = None
    reason: str | None = None


def home_route_for(role: Role | str | None) -> Route:
    if isinstance(role, str) and not isinstance(role, Role):
        try:
            role = Role(role)
        except ValueError:
            return Route.LOGIN
    if role is None:
        return Route.LOGIN
    return _HOME_BY_ROLE.get(role, Route.LOGIN)


def authorize_route(required_roles: frozenset[Role] | set[Role], session: Session | None) -> RouteDecision:
    """Guard evaluated before a protected navigation completes.

    Reads only the already-resident session, so a login still in flight is
    treated as no session at all.
    """
    if session is None or not session.credential:
        return RouteDecision(False, Route.LOGIN, "not_logged_in")
    if required_roles and session.role not in required_roles:
        return RouteDecision(False, home_route_for(session.role), "role_not_allowed")
    return RouteDecision(True)


def resolve_route(path: str) -> Route:
    """Map a path to a route; anything unknown lands on login."""
    normalized = path.strip().strip("/")
    if not normalized:
        return Route.HOME
    try:
        return Route(normalized)
    except ValueError:
        return Route.LOGIN


class Router:
    """Tracks the current screen and applies the guard to every navigation.

    Each screen change bumps the ``screen`` context of the HTTP client, so
    fetches issued by the previous screen are abandoned when they complete.
    """

    CONTEXT_KEY = "screen"

    def __init__(
        self,
        session_provider: Callable[[], Session | None],
        on_screen_change: Callable[[str], int] | None = None,
    ) -> None:
        self._session_provider = session_provider
        self._on_screen_change = on_screen_change
        self.current: Route = Route.LOGIN
        self.history: list[Route] = []

    def navigate(self, target: Route | str) -> RouteDecision:
        route = target if isinstance(target, Route) else resolve_route(target)
        spec = ROUTE_SPECS[route]
        if spec.public:
            decision = RouteDecision(True)
        else:
            decision = authorize_route(spec.required_roles, self._session_provider())
        if decision.allowed:
            self._enter(route)
            return decision
        logger.info(
            "navigation_denied",
            extra={"route": route.value, "reason": decision.reason, "redirect": decision.redirect.value},
        )
        self._enter(decision.redirect or Route.LOGIN)
        return decision

    def _enter(self, route: Route) -> None:
        self.history.append(route)
        self.current = route
        if self._on_screen_change:
            self._on_screen_change(self.CONTEXT_KEY)
