"""
Slack Log Delivery Module

Ships log records to a Slack incoming webhook as formatted messages with
severity colors, contextual fields and exception detail.

Usage:
    import logging
    from slacklog import SlackHandler, load_config_from_env

    handler = SlackHandler(load_config_from_env(), level=logging.ERROR)
    logging.getLogger().addHandler(handler)

    logging.getLogger("app").error("Disk full", extra={"host": "web1"})

Or, without the logging package:
    from slacklog import LogEvent, create_config, deliver

    error = deliver(LogEvent(text="Disk full", level=logging.ERROR),
                    create_config("https://hooks.slack.com/services/..."))

Configuration:
    Set in environment variables (or a .env file):
    - SLACK_WEBHOOK_URL
    - SLACK_COMPACT
    - SLACK_USE_PROXY, SLACK_PROXY_HOST, SLACK_PROXY_PORT
    - SLACK_PROXY_USER, SLACK_PROXY_PASSWORD

Delivery is synchronous. Wrap the handler with
logging.handlers.QueueHandler/QueueListener to keep it off hot paths.
"""

import logging

from .builder import SlackMessageBuilder
from .composer import Colors, compose_payload, get_color_for_level
from .config import (
    ProxySettings,
    SlackConfig,
    SlackConfigurationError,
    create_config,
    load_config_from_env,
)
from .handler import SlackHandler, deliver, record_to_event
from .slack_sender import SlackClient
from .types import Attachment, Field, LogEvent, Payload


__all__ = [
    # Main API
    "SlackHandler",
    "deliver",
    "get_slack_handler",
    "record_to_event",
    # Configuration
    "SlackConfig",
    "ProxySettings",
    "SlackConfigurationError",
    "load_config_from_env",
    "create_config",
    # Messages
    "SlackMessageBuilder",
    "SlackClient",
    "Payload",
    "Attachment",
    "Field",
    "LogEvent",
    "Colors",
    "compose_payload",
    "get_color_for_level",
]


# Global handler instance (lazily initialized)
_slack_handler: SlackHandler = None


def get_slack_handler(level: int = logging.ERROR) -> SlackHandler:
    """
    Get or create the global Slack handler from environment configuration.

    Args:
        level: Handler level used when the handler is first created

    Returns:
        The global SlackHandler instance

    Raises:
        SlackConfigurationError: If the environment configuration is invalid
    """
    global _slack_handler
    if _slack_handler is None:
        _slack_handler = SlackHandler(load_config_from_env(), level=level)
    return _slack_handler
