from .auth import AuthClient
from .catalog_client import CustomersClient, ProductsClient
from .orders_client import OrdersClient

__all__ = [
    "AuthClient",
    "CustomersClient",
    "OrdersClient",
    "ProductsClient",
]
