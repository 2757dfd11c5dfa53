"""Recording fakes for the GC Notify senders."""

from typing import Any, Dict, List, Optional, Tuple

from infrastructure.operations import OperationResult

Call = Tuple[str, str, Dict[str, Any]]


class RecordingSender:
    """Stands in for the Notify client on both channels.

    Each channel can be configured to return a result or raise.
    """

    def __init__(
        self,
        email_result: Optional[OperationResult] = None,
        sms_result: Optional[OperationResult] = None,
        email_error: Optional[Exception] = None,
        sms_error: Optional[Exception] = None,
    ):
        self.email_result = email_result or OperationResult.success(
            data={"notification_id": "notify-email"}
        )
        self.sms_result = sms_result or OperationResult.success(
            data={"notification_id": "notify-sms"}
        )
        self.email_error = email_error
        self.sms_error = sms_error
        self.emails: List[Call] = []
        self.sms: List[Call] = []

    async def send_email(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        self.emails.append((to, template_key, variables))
        if self.email_error is not None:
            raise self.email_error
        return self.email_result

    async def send_sms(
        self, to: str, template_key: str, variables: Dict[str, Any]
    ) -> OperationResult:
        self.sms.append((to, template_key, variables))
        if self.sms_error is not None:
            raise self.sms_error
        return self.sms_result
