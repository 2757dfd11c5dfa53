"""Domain exceptions for the realtime and notification services.

Channel delivery failures are never raised; senders report them as
OperationResult values. The exceptions below abort the operation that
raised them.
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service errors.

    Example:
        try:
            await service.send_order_notification(order_id, "CONFIRMED")
        except ServiceError as e:
            logger.error("order_notification_failed", error=str(e))
    """

    pass


class AuthError(ServiceError):
    """Raised when a connection or request cannot be authenticated.

    Covers missing, malformed, expired or badly signed tokens and tokens
    whose subject is unknown or inactive. The WebSocket handshake closes
    with code 1008, REST calls answer 401.
    """

    pass


class RecipientNotFound(ServiceError):
    """Raised when a notification recipient id does not resolve to a user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Recipient {user_id} not found")


class AggregateNotFound(ServiceError):
    """Raised when a referenced order, pharmacy, prescription or item is missing.

    Example:
        >>> await service.send_order_notification("missing", "CONFIRMED")
        Traceback (most recent call last):
        ...
        AggregateNotFound: Order missing not found
    """

    def __init__(self, kind: str, aggregate_id: str, message: Optional[str] = None):
        self.kind = kind
        self.aggregate_id = aggregate_id
        super().__init__(message or f"{kind} {aggregate_id} not found")


class NotificationNotFound(AggregateNotFound):
    """Raised when a notification does not exist or belongs to another user."""

    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


class PermissionDenied(ServiceError):
    """Raised when an authenticated user may not perform an operation."""

    pass
