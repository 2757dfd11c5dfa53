"""Connection registry.

Authenticates realtime connections and owns room membership. A connection
is admitted into exactly its ``user:`` and ``tenant:`` rooms at handshake;
pharmacy and order rooms are joined on request after the aggregate has been
checked against the connection's tenant.
"""

from typing import Dict, List, Optional

from infrastructure.auth.security import TokenVerifier
from infrastructure.exceptions import AuthError
from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import UserRole
from infrastructure.persistence.stores import OrderStore, PharmacyStore, UserStore
from infrastructure.realtime.models import Connection, ConnectionContext
from infrastructure.realtime.rooms import (
    SUBSCRIBABLE_KINDS,
    RoomKind,
    parse_room,
    tenant_room,
    user_room,
)

logger = get_module_logger()

# Roles that see pharmacy-wide inventory activity.
_PHARMACY_ROOM_ROLES = frozenset(
    {
        UserRole.SUPER_ADMIN.value,
        UserRole.ADMIN.value,
        UserRole.PHARMACIST.value,
        UserRole.WORKER.value,
    }
)


class ConnectionRegistry:
    """Maps authenticated connections to rooms.

    Membership is only mutated here. The broadcaster reads it through
    ``members``.

    Attributes:
        user_store: Source of truth for user activity, tenant and role
        token_verifier: Verifies handshake tokens
        pharmacy_store: Used to authorize pharmacy room subscriptions
        order_store: Used to authorize order room subscriptions
        queue_size: Outbound queue bound applied to new connections
    """

    def __init__(
        self,
        user_store: UserStore,
        token_verifier: TokenVerifier,
        pharmacy_store: Optional[PharmacyStore] = None,
        order_store: Optional[OrderStore] = None,
        queue_size: int = 256,
    ):
        self.user_store = user_store
        self.token_verifier = token_verifier
        self.pharmacy_store = pharmacy_store
        self.order_store = order_store
        self.queue_size = queue_size
        self._rooms: Dict[str, Dict[str, Connection]] = {}
        self._connections: Dict[str, Connection] = {}

    async def authenticate(self, raw_token: Optional[str]) -> ConnectionContext:
        """Verify a handshake token and resolve the connection identity.

        Raises:
            AuthError: Invalid token, unknown user or inactive user.
        """
        claims = self.token_verifier.verify(raw_token)
        user_id = str(claims["sub"])

        user = await self.user_store.find_user_by_id(user_id)
        if user is None or not user.is_active:
            logger.info("connection_rejected", user_id=user_id, reason="user_inactive")
            raise AuthError("User not found or inactive")

        return ConnectionContext(
            user_id=user.id,
            tenant_id=user.tenant_id,
            role=user.role.value,
        )

    def admit(self, context: ConnectionContext) -> Connection:
        """Register an authenticated connection in its handshake rooms."""
        connection = Connection(context=context, max_queue_size=self.queue_size)
        self._connections[connection.connection_id] = connection
        self._join(connection, user_room(context.user_id))
        self._join(connection, tenant_room(context.tenant_id))
        logger.info(
            "connection_admitted",
            connection_id=connection.connection_id,
            user_id=context.user_id,
            tenant_id=context.tenant_id,
        )
        return connection

    async def connect(self, raw_token: Optional[str]) -> Connection:
        """Authenticate and admit in one step."""
        context = await self.authenticate(raw_token)
        return self.admit(context)

    async def subscribe(self, connection: Connection, room: str) -> bool:
        """Join a pharmacy or order room of the connection's tenant.

        Returns:
            True when joined (or already a member), False when the room is
            not subscribable or the connection may not see it.
        """
        if connection.closed:
            return False
        try:
            kind, identifier = parse_room(room)
        except ValueError:
            return False
        if kind not in SUBSCRIBABLE_KINDS:
            return False

        if not await self._may_join(connection.context, kind, identifier):
            logger.info(
                "room_subscription_denied",
                connection_id=connection.connection_id,
                room=room,
            )
            return False

        self._join(connection, room)
        return True

    def unsubscribe(self, connection: Connection, room: str) -> bool:
        """Leave a pharmacy or order room. Handshake rooms cannot be left."""
        try:
            kind, _ = parse_room(room)
        except ValueError:
            return False
        if kind not in SUBSCRIBABLE_KINDS or not connection.in_room(room):
            return False
        self._leave(connection, room)
        return True

    def disconnect(self, connection: Connection) -> None:
        """Leave every room and stop the connection's delivery loop."""
        for room in list(connection.rooms):
            self._leave(connection, room)
        self._connections.pop(connection.connection_id, None)
        connection.close()
        logger.info(
            "connection_closed",
            connection_id=connection.connection_id,
            user_id=connection.user_id,
            dropped_events=connection.dropped,
        )

    def disconnect_all(self) -> None:
        for connection in list(self._connections.values()):
            self.disconnect(connection)

    def members(self, room: str) -> List[Connection]:
        """Snapshot of the room's connections in join order."""
        return list(self._rooms.get(room, {}).values())

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def _may_join(
        self, context: ConnectionContext, kind: RoomKind, identifier: str
    ) -> bool:
        if kind == RoomKind.PHARMACY:
            if self.pharmacy_store is None or context.role not in _PHARMACY_ROOM_ROLES:
                return False
            pharmacy = await self.pharmacy_store.find_by_id(identifier)
            return pharmacy is not None and pharmacy.tenant_id == context.tenant_id

        if self.order_store is None:
            return False
        order = await self.order_store.find_by_id(identifier)
        if order is None or order.tenant_id != context.tenant_id:
            return False
        if context.role == UserRole.CUSTOMER.value:
            return order.customer_id == context.user_id
        if context.role == UserRole.DELIVERY.value:
            return order.delivery_user_id == context.user_id
        return True

    def _join(self, connection: Connection, room: str) -> None:
        members = self._rooms.setdefault(room, {})
        if connection.connection_id in members:
            return
        members[connection.connection_id] = connection
        connection.rooms.append(room)

    def _leave(self, connection: Connection, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.pop(connection.connection_id, None)
            if not members:
                del self._rooms[room]
        if room in connection.rooms:
            connection.rooms.remove(room)
