"""Test data factories for deterministic test data generation."""

from tests.factories.pharmacy import (
    make_intent,
    make_inventory_item,
    make_order,
    make_pharmacy,
    make_prescription,
    make_record,
    make_user,
)

__all__ = [
    "make_intent",
    "make_inventory_item",
    "make_order",
    "make_pharmacy",
    "make_prescription",
    "make_record",
    "make_user",
]
