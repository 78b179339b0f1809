from __future__ import annotations

import pytest

from mediatech_client import Role, Route, Router, Session, authorize_route, home_route_for
from mediatech_client.navigation import ROUTE_SPECS, resolve_route


def _session(role: Role) -> Session:
    customer_id = 7 if role is Role.CUSTOMER else None
    return Session(credential="token", username="user", role=role, customer_id=customer_id)


def test_seller_on_admin_route_goes_to_seller_home() -> None:
    decision = authorize_route(frozenset({Role.ADMIN}), _session(Role.SELLER))

    assert not decision.allowed
    assert decision.redirect is Route.SELLER_HOME


@pytest.mark.parametrize("route", [spec.route for spec in ROUTE_SPECS.values() if spec.required_roles])
def test_no_session_redirects_to_login(route: Route) -> None:
    decision = authorize_route(ROUTE_SPECS[route].required_roles, None)

    assert not decision.allowed
    assert decision.redirect is Route.LOGIN


@pytest.mark.parametrize(
    ("role", "home"),
    [
        (Role.ADMIN, Route.ADMIN_HOME),
        (Role.SELLER, Route.SELLER_HOME),
        (Role.CUSTOMER, Route.CUSTOMER_HOME),
        (None, Route.LOGIN),
        ("MANAGER", Route.LOGIN),
    ],
)
def test_home_route_for(role, home: Route) -> None:
    assert home_route_for(role) is home


def test_empty_role_set_allows_any_logged_in_user() -> None:
    assert authorize_route(frozenset(), _session(Role.CUSTOMER)).allowed


def test_admin_cannot_open_order_creation() -> None:
    decision = authorize_route(ROUTE_SPECS[Route.ORDER_CREATE].required_roles, _session(Role.ADMIN))

    assert decision.redirect is Route.ADMIN_HOME


def test_all_roles_can_list_orders() -> None:
    required = ROUTE_SPECS[Route.ORDERS].required_roles
    for role in Role:
        assert authorize_route(required, _session(role)).allowed


def test_router_follows_redirect_and_switches_context() -> None:
    switched: list[str] = []
    session = _session(Role.CUSTOMER)

    def _switch(key: str) -> int:
        switched.append(key)
        return len(switched)

    router = Router(lambda: session, on_screen_change=_switch)

    decision = router.navigate(Route.PRODUCTS)

    assert not decision.allowed
    assert router.current is Route.CUSTOMER_HOME
    assert switched == [Router.CONTEXT_KEY]


def test_router_public_routes_need_no_session() -> None:
    router = Router(lambda: None)

    assert router.navigate("register").allowed
    assert router.current is Route.REGISTER
    assert not router.navigate("factures").allowed
    assert router.current is Route.LOGIN


@pytest.mark.parametrize(
    ("path", "route"),
    [("", Route.HOME), ("/factures/create", Route.ORDER_CREATE), ("nowhere", Route.LOGIN)],
)
def test_resolve_route(path: str, route: Route) -> None:
    assert resolve_route(path) is route
