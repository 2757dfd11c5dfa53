"""Result models returned by the pharmacy notification service."""

from typing import List, Optional

from pydantic import BaseModel, Field

from infrastructure.notifications.models import DispatchResult


class FanOutResult(BaseModel):
    """Outcome of a notification sent to a group of staff members."""

    success: bool = True
    results: List[DispatchResult] = Field(default_factory=list)


class AggregateNotificationResult(BaseModel):
    """Outcome of a notification about one order or prescription.

    ``notifications`` holds the customer notification first, followed by
    any secondary recipient (the driver of a delivery).
    """

    success: bool = True
    aggregate_id: str
    notifications: List[DispatchResult] = Field(default_factory=list)

    @property
    def primary(self) -> Optional[DispatchResult]:
        return self.notifications[0] if self.notifications else None
