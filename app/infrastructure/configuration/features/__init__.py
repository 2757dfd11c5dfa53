"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.realtime import RealtimeSettings

__all__ = [
    "RealtimeSettings",
]
