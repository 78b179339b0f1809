from .auth_store import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .cart import CartAggregator, CartLine, Subscription
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ProtocolError,
    RequestCancelledError,
    StockInsufficientError,
    TransitionError,
    TransportError,
    ValidationError,
)
from .http_client import HttpClient
from .interceptors import RequestAuthenticator, is_auth_endpoint
from .models import Customer, Order, OrderLine, OrderStatus, Product, Role, Session
from .navigation import Route, RouteDecision, Router, authorize_route, home_route_for
from .orders import OrderDraft, OrderWorkflow, order_actions, sorted_for
from .portal import PortalApp
from .session import SessionStore
from .ui_errors import UserFacingError, to_user_facing_error

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AuthError",
    "CartAggregator",
    "CartLine",
    "ClientConfig",
    "ConfigError",
    "ConflictError",
    "Customer",
    "FileKeyValueStore",
    "HttpClient",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "NotFoundError",
    "Order",
    "OrderDraft",
    "OrderLine",
    "OrderStatus",
    "OrderWorkflow",
    "PermissionDeniedError",
    "PortalApp",
    "Product",
    "ProtocolError",
    "RequestAuthenticator",
    "RequestCancelledError",
    "Role",
    "Route",
    "RouteDecision",
    "Router",
    "Session",
    "SessionStore",
    "StockInsufficientError",
    "Subscription",
    "TransitionError",
    "TransportError",
    "UserFacingError",
    "ValidationError",
    "authorize_route",
    "home_route_for",
    "is_auth_endpoint",
    "load_config",
    "order_actions",
    "sorted_for",
    "to_user_facing_error",
]
