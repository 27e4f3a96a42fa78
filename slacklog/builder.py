"""
Fluent builder for Slack webhook messages.

Usage:
    SlackMessageBuilder.build(url, proxy) \\
        .on_error(lambda e: print(e)) \\
        .with_message("Disk full") \\
        .add_attachment(attachment) \\
        .send()
"""

from typing import Optional

from .composer import add_attachment
from .config import DEFAULT_TIMEOUT, ProxySettings, validate_webhook_url
from .slack_sender import ErrorObserver, SlackClient
from .types import Attachment, Payload


class SlackMessageBuilder:
    """
    Accumulates a payload for one webhook URL and sends it.

    Send failures are never raised: they go to the callbacks registered
    with on_error(), each invoked once per failed send.
    """

    def __init__(
        self,
        webhook_url: str,
        proxy_settings: Optional[ProxySettings] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        validate_webhook_url(webhook_url)
        if proxy_settings is not None:
            proxy_settings.validate()

        self._webhook_url = webhook_url.strip()
        self._client = SlackClient(proxy_settings, timeout)
        self._payload = Payload()

    @classmethod
    def build(
        cls,
        webhook_url: str,
        proxy_settings: Optional[ProxySettings] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "SlackMessageBuilder":
        return cls(webhook_url, proxy_settings, timeout)

    @property
    def payload(self) -> Payload:
        return self._payload

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    def with_message(self, message: str) -> "SlackMessageBuilder":
        self._payload.text = message
        return self

    def add_attachment(self, attachment: Attachment) -> "SlackMessageBuilder":
        add_attachment(self._payload, attachment)
        return self

    def on_error(self, callback: ErrorObserver) -> "SlackMessageBuilder":
        self._client.add_error_observer(callback)
        return self

    def send(self) -> None:
        """Serialize the payload and deliver it; failures go to on_error callbacks."""
        try:
            data = self._payload.to_json()
        except (TypeError, ValueError) as e:
            self._client.report_error(e)
            return

        self._client.send(self._webhook_url, data)
