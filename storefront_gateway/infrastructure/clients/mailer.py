"""AWS SES client for transactional email"""

import logging
from typing import List, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from storefront_gateway.config import settings
from storefront_gateway.domain.exceptions import EmailDeliveryError
from storefront_gateway.domain.models import EmailContent
from storefront_gateway.infrastructure.observability.metrics import upstream_latency_histogram
from storefront_gateway.utils.mask_email import mask_email

logger = logging.getLogger(__name__)


class EmailClient:
    """Sends HTML + text emails through SES"""

    def __init__(self, source: str | None = None, region: str | None = None, ses_client=None):
        self.source = source or settings.ses_source_email
        self.region = region or settings.aws_region
        self._ses = ses_client

    @property
    def ses(self):
        if self._ses is None:
            self._ses = boto3.client("ses", region_name=self.region)
        return self._ses

    def _send(self, to: List[str], content: EmailContent) -> str:
        try:
            with upstream_latency_histogram.labels(service="ses").time():
                response = self.ses.send_email(
                    Source=self.source,
                    Destination={"ToAddresses": to},
                    Message={
                        "Subject": {"Data": content.subject, "Charset": "UTF-8"},
                        "Body": {
                            "Html": {"Data": content.html, "Charset": "UTF-8"},
                            "Text": {"Data": content.text, "Charset": "UTF-8"},
                        },
                    },
                )
        except (BotoCoreError, ClientError) as e:
            raise EmailDeliveryError(f"SES send_email failed: {e}") from e

        return response["MessageId"]

    async def send(self, to: Union[str, List[str]], content: EmailContent) -> str:
        """
        Send an email and return the SES message id.

        The boto3 call is blocking, so it runs in the threadpool.

        Raises:
            EmailDeliveryError: When SES rejects the message or is unreachable
        """
        recipients = [to] if isinstance(to, str) else list(to)
        message_id = await run_in_threadpool(self._send, recipients, content)
        logger.info(
            "Email sent",
            extra={
                "step": "email_sent",
                "recipients": [mask_email(r) for r in recipients],
                "message_id": message_id,
            },
        )
        return message_id
