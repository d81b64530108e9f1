"""
Module 'orders' (feature-first): point d'entrée public.
Réunit catalogue, arithmétique TVA, normalisation du panier, construction de requête Mollie et metadata.
"""

from .catalog import PRODUCT_CATALOG, lookup
from .money import price_line, sum_totals, parse_vat_rate, to_decimal_string
from .cart import clamp_quantity, normalize, price_lines
from .builder import build
from .metadata import make_metadata, extract_order_metadata, RecoveredOrder
from .models import (
    CartLine,
    CheckoutType,
    CreateOrderIn,
    Customer,
    OrderLine,
    OrderRequest,
    ProductCatalogEntry,
    ShippingAddress,
)

__all__ = [
    # catalog
    "PRODUCT_CATALOG",
    "lookup",
    # money
    "price_line",
    "sum_totals",
    "parse_vat_rate",
    "to_decimal_string",
    # cart
    "clamp_quantity",
    "normalize",
    "price_lines",
    # builder / metadata
    "build",
    "make_metadata",
    "extract_order_metadata",
    "RecoveredOrder",
    # types
    "CartLine",
    "CheckoutType",
    "CreateOrderIn",
    "Customer",
    "OrderLine",
    "OrderRequest",
    "ProductCatalogEntry",
    "ShippingAddress",
]
