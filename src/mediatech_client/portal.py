from __future__ import annotations

import logging
from dataclasses import dataclass

from .auth_store import FileKeyValueStore, KeyValueStore
from .cart import CartAggregator
from .clients.auth import AuthClient
from .clients.catalog_client import CustomersClient, ProductsClient
from .clients.orders_client import OrdersClient
from .config import ClientConfig, load_config
from .exceptions import ApiError, AuthError
from .http_client import HttpClient
from .interceptors import RequestAuthenticator
from .models import Order, Role
from .navigation import Route, RouteDecision, Router, home_route_for
from .orders import OrderWorkflow
from .session import SessionStore
from .ui_errors import to_user_facing_error

logger = logging.getLogger(__name__)


@dataclass
class ScreenResult:
    route: Route
    error_message: str | None = None


class PortalApp:
    """One running portal client: a single session, cart, HTTP client and router."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        storage: KeyValueStore | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self.config = config or load_config()
        self.http = http or HttpClient(config=self.config)
        self.auth_client = AuthClient(http=self.http)
        self.session = SessionStore(
            self.auth_client,
            storage if storage is not None else FileKeyValueStore(),
            min_password_length=self.config.min_password_length,
        )
        self.http.add_request_shaper(RequestAuthenticator(self.session), first=True)
        self.http.on_auth_failure = self._handle_auth_failure
        self.cart = CartAggregator()
        self.products = ProductsClient(http=self.http)
        self.customers = CustomersClient(http=self.http)
        self.orders = OrderWorkflow(OrdersClient(http=self.http), self.session)
        self.router = Router(self.session.current, on_screen_change=self.http.switch_context)
        self.error_message: str | None = None

    def start(self) -> ScreenResult:
        if not self.session.is_logged_in():
            self.router.navigate(Route.LOGIN)
        else:
            self.router.navigate(home_route_for(self.session.role))
        return ScreenResult(route=self.router.current)

    def login(self, username: str, password: str) -> ScreenResult:
        try:
            session = self.session.login(username, password)
        except ApiError as exc:
            self.error_message = to_user_facing_error(exc, during_login=True).message
            self.router.navigate(Route.LOGIN)
            return ScreenResult(route=self.router.current, error_message=self.error_message)
        self.error_message = None
        if session.role is Role.CUSTOMER:
            self.cart.clear()
        self.router.navigate(home_route_for(session.role))
        return ScreenResult(route=self.router.current)

    def logout(self) -> ScreenResult:
        self.session.logout()
        self.cart.clear()
        self.orders.orders = []
        self.router.navigate(Route.LOGIN)
        return ScreenResult(route=self.router.current)

    def navigate(self, target: Route | str) -> RouteDecision:
        return self.router.navigate(target)

    def load_orders(self) -> list[Order]:
        """Fetch the order list for the current screen.

        A response that completes after the user has moved to another screen
        raises ``RequestCancelledError`` and leaves the local list untouched.
        """
        version = self.http.get_context_version(Router.CONTEXT_KEY)
        return self.orders.list_orders(context_key=Router.CONTEXT_KEY, context_version=version)

    def checkout(self) -> ScreenResult:
        try:
            self.orders.checkout(self.cart)
        except ApiError as exc:
            self.error_message = to_user_facing_error(exc).message
            return ScreenResult(route=self.router.current, error_message=self.error_message)
        self.error_message = None
        return ScreenResult(route=self.router.current)

    def _handle_auth_failure(self, error: AuthError) -> None:
        logger.warning("credential_rejected", extra={"status_code": error.status_code, "code": error.code})
        self.session.invalidate("credential_rejected")
        self.cart.clear()
        self.router.navigate(Route.LOGIN)
