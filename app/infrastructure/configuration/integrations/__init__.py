"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.notify import NotifySettings

__all__ = [
    "AwsSettings",
    "NotifySettings",
]
