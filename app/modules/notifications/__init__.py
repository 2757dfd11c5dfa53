"""Pharmacy notifications: staff fan-out and domain notification wrappers."""

from modules.notifications.service import PharmacyNotificationService

__all__ = ["PharmacyNotificationService"]
