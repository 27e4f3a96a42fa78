"""
Slack webhook transport layer.

Handles HTTP delivery of serialized payloads, optionally through a proxy.

This is a best-effort operation:
- One attempt per send, bounded by the configured timeout
- Catches all exceptions
- Never raises to callers; failures go to the registered error observers
"""

import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_TIMEOUT, ProxySettings


logger = logging.getLogger(__name__)

ErrorObserver = Callable[[Exception], None]

CONTENT_TYPE = "application/json; charset=utf-8"
USER_AGENT = "slacklog/1.0"

# The proxy IP lookup is diagnostics only; keep it short.
_IP_LOOKUP_TIMEOUT = 3.0


def build_proxies(settings: ProxySettings) -> Dict[str, str]:
    """
    Build a requests proxies mapping for the given proxy settings.

    Credentials are only attached when both user and password are set.
    """
    credentials = ""
    if settings.has_credentials:
        credentials = f"{quote(settings.user, safe='')}:{quote(settings.password, safe='')}@"

    proxy_url = f"http://{credentials}{settings.host}:{settings.port}"
    return {"http": proxy_url, "https": proxy_url}


class SlackClient:
    """
    Sends one serialized payload per call to a Slack webhook.

    Failures are reported to every observer added with
    add_error_observer(), in registration order, and never raised.
    """

    def __init__(
        self,
        proxy_settings: Optional[ProxySettings] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._proxy_settings = proxy_settings
        self._timeout = timeout
        self._observers: List[ErrorObserver] = []

    def add_error_observer(self, observer: ErrorObserver) -> None:
        self._observers.append(observer)

    def send(self, url: str, data: str) -> None:
        """
        POST a JSON body to the webhook URL.

        Args:
            url: The Slack webhook URL
            data: Serialized JSON payload
        """
        try:
            self._post(url, data)
        except Exception as e:
            self.report_error(e)

    def _post(self, url: str, data: str) -> None:
        with requests.Session() as session:
            if self._proxy_settings is not None:
                session.proxies.update(build_proxies(self._proxy_settings))
                if self._proxy_settings.ip_lookup_url:
                    self._log_proxy_ip(session, self._proxy_settings.ip_lookup_url)

            response = session.post(
                url,
                data=data.encode("utf-8"),
                headers={
                    "Content-Type": CONTENT_TYPE,
                    "User-Agent": USER_AGENT,
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            logger.debug(f"Slack webhook sent successfully: {response.status_code}")

    def _log_proxy_ip(self, session: requests.Session, lookup_url: str) -> None:
        try:
            response = session.get(lookup_url, timeout=min(self._timeout, _IP_LOOKUP_TIMEOUT))
            response.raise_for_status()
            logger.debug(f"Outbound IP through proxy is {response.text.strip()}")
        except requests.RequestException as e:
            logger.debug(f"Proxy IP lookup failed: {e}")

    def report_error(self, error: Exception) -> None:
        """Log a failed delivery and pass it to every observer."""
        logger.error(f"Slack webhook delivery failed: {type(error).__name__}: {error}")
        for observer in list(self._observers):
            try:
                observer(error)
            except Exception as e:
                logger.error(f"Slack error observer raised: {type(e).__name__}: {e}")
