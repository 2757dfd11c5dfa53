"""Infrastructure modules for the pharmacy realtime service.

Centralized infrastructure components:
- configuration: Settings management (Settings)
- logging: Structured logging (configure_logging, get_module_logger)
- auth: Access token verification (TokenVerifier)
- exceptions: Domain exception hierarchy
- operations: Operation results and HTTP error classification
- persistence: Domain aggregates, store interfaces and backends
- realtime: Rooms, connection registry, broadcaster, task scheduler
- notifications: Channels, dispatcher and inbox
- services: Dependency injection providers and type aliases
"""
