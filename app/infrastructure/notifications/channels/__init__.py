"""Notification channel implementations."""

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel, EmailSender
from infrastructure.notifications.channels.sms import SMSChannel, SmsSender
from infrastructure.notifications.channels.socket import SocketChannel

__all__ = [
    "NotificationChannel",
    "EmailChannel",
    "EmailSender",
    "SMSChannel",
    "SmsSender",
    "SocketChannel",
]
