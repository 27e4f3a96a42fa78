"""
Configuration for the Slack log delivery system.

Supports loading from environment variables (and a local .env file)
or direct configuration. Validation happens here, before any message
is sent.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_TRUE_VALUES = ("true", "1", "yes", "on")


class SlackConfigurationError(ValueError):
    """Raised when the webhook or proxy configuration is unusable."""

    def __init__(self, parameter: str, message: str):
        super().__init__(f"{parameter}: {message}")
        self.parameter = parameter


@dataclass(frozen=True)
class ProxySettings:
    """
    Outbound proxy used for webhook delivery.

    Attributes:
        host: Proxy host name or address
        port: Proxy port
        user: Optional basic-auth user (requires password)
        password: Optional basic-auth password (requires user)
        ip_lookup_url: Opt-in diagnostic endpoint fetched through the
            proxy before each send; its answer is logged at DEBUG
    """
    host: str
    port: int
    user: Optional[str] = None
    password: Optional[str] = None
    ip_lookup_url: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.user) and bool(self.password)

    def validate(self) -> None:
        """Raise SlackConfigurationError if the settings are incomplete."""
        if not self.host:
            raise SlackConfigurationError("proxy_host", "proxy host must not be empty")

        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise SlackConfigurationError("proxy_port", f"invalid proxy port: {self.port!r}")

        if self.user and not self.password:
            raise SlackConfigurationError("proxy_user", "proxy user configured with no proxy password")

        if self.password and not self.user:
            raise SlackConfigurationError("proxy_password", "proxy password configured with no proxy user")


# A field extractor computes one value per log event (e.g. the process id).
FieldExtractor = Callable[[Any], Any]


@dataclass
class SlackConfig:
    """
    Configuration for Slack delivery.

    Attributes:
        webhook_url: Incoming-webhook URL (absolute)
        compact: Suppress default process fields and exception detail
        proxy: Optional proxy settings
        fields: Named extractors always included as message fields
        include_event_properties: Include per-record properties as fields
        timeout: HTTP timeout in seconds
        enabled: Whether delivery is enabled
    """
    webhook_url: str
    compact: bool = False
    proxy: Optional[ProxySettings] = None
    fields: Dict[str, FieldExtractor] = field(default_factory=dict)
    include_event_properties: bool = True
    timeout: float = DEFAULT_TIMEOUT
    enabled: bool = True

    def validate(self) -> None:
        """Raise SlackConfigurationError if the configuration is unusable."""
        validate_webhook_url(self.webhook_url)
        if self.proxy is not None:
            self.proxy.validate()

    def is_valid(self) -> bool:
        """Check if configuration is valid without raising."""
        try:
            self.validate()
        except SlackConfigurationError:
            return False
        return True


def validate_webhook_url(url: Optional[str]) -> None:
    """
    Check that a webhook URL is present and absolute.

    Raises:
        SlackConfigurationError: If the URL is empty or not absolute
    """
    if not url or not url.strip():
        raise SlackConfigurationError("webhook_url", "webhook URL cannot be empty")

    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        raise SlackConfigurationError("webhook_url", f"webhook URL is an invalid URL: {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise SlackConfigurationError("webhook_url", "webhook URL is an invalid URL")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def _load_proxy_from_env() -> Optional[ProxySettings]:
    if not _env_flag("SLACK_USE_PROXY", "false"):
        return None

    port_str = os.getenv("SLACK_PROXY_PORT", "")
    try:
        port = int(port_str)
    except ValueError as e:
        raise SlackConfigurationError("proxy_port", f"invalid proxy port: {port_str!r}") from e

    return ProxySettings(
        host=os.getenv("SLACK_PROXY_HOST", ""),
        port=port,
        user=os.getenv("SLACK_PROXY_USER") or None,
        password=os.getenv("SLACK_PROXY_PASSWORD") or None,
        ip_lookup_url=os.getenv("SLACK_PROXY_IP_LOOKUP_URL") or None,
    )


def load_config_from_env() -> SlackConfig:
    """
    Load Slack configuration from environment variables.

    Environment variables:
        SLACK_WEBHOOK_URL: Incoming webhook URL
        SLACK_COMPACT: Optional compact flag (default: false)
        SLACK_INCLUDE_EVENT_PROPERTIES: Optional (default: true)
        SLACK_WEBHOOK_TIMEOUT: Optional timeout (default: 10.0)
        SLACK_NOTIFICATIONS_ENABLED: Optional enabled flag (default: true)
        SLACK_USE_PROXY: Optional proxy flag (default: false)
        SLACK_PROXY_HOST, SLACK_PROXY_PORT: Proxy endpoint
        SLACK_PROXY_USER, SLACK_PROXY_PASSWORD: Optional proxy credentials
        SLACK_PROXY_IP_LOOKUP_URL: Optional proxy diagnostic endpoint

    Returns:
        SlackConfig loaded from environment (not yet validated)
    """
    load_dotenv()

    timeout_str = os.getenv("SLACK_WEBHOOK_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_str)
    except ValueError:
        logger.warning(f"Invalid SLACK_WEBHOOK_TIMEOUT {timeout_str!r}, using {DEFAULT_TIMEOUT}")
        timeout = DEFAULT_TIMEOUT

    return SlackConfig(
        webhook_url=os.getenv("SLACK_WEBHOOK_URL", ""),
        compact=_env_flag("SLACK_COMPACT", "false"),
        proxy=_load_proxy_from_env(),
        include_event_properties=_env_flag("SLACK_INCLUDE_EVENT_PROPERTIES", "true"),
        timeout=timeout,
        enabled=_env_flag("SLACK_NOTIFICATIONS_ENABLED", "true"),
    )


def create_config(
    webhook_url: str,
    compact: bool = False,
    proxy: Optional[ProxySettings] = None,
    fields: Optional[Dict[str, FieldExtractor]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    enabled: bool = True,
) -> SlackConfig:
    """
    Create and validate a Slack configuration directly.

    Args:
        webhook_url: Incoming webhook URL
        compact: Suppress process fields and exception detail
        proxy: Optional proxy settings
        fields: Named extractors always included as fields
        timeout: HTTP timeout in seconds
        enabled: Whether delivery is enabled

    Returns:
        SlackConfig instance

    Raises:
        SlackConfigurationError: If the URL or proxy settings are invalid
    """
    config = SlackConfig(
        webhook_url=webhook_url,
        compact=compact,
        proxy=proxy,
        fields=dict(fields or {}),
        timeout=timeout,
        enabled=enabled,
    )
    config.validate()
    return config
