"""Collaborative inventory editing with editing presence."""

from modules.collaboration.coordinator import (
    BulkUpdate,
    BulkUpdateResult,
    CollaborationCoordinator,
)

__all__ = ["BulkUpdate", "BulkUpdateResult", "CollaborationCoordinator"]
