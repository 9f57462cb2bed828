"""Database models"""
from airdealer.models.admin import AdminRecord
from airdealer.models.catalog import Location, Product
from airdealer.models.customer import Customer
from airdealer.models.identity import AuthIdentity
from airdealer.models.order import Order, OrderItem
from airdealer.models.revoked_token import RevokedToken

__all__ = [
    "AdminRecord",
    "AuthIdentity",
    "Customer",
    "Location",
    "Order",
    "OrderItem",
    "Product",
    "RevokedToken",
]
