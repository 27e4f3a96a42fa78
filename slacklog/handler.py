"""
Host integration with the standard logging package.

deliver() is the core entry point: one log event in, one delivery
attempt out, the failure (if any) returned instead of raised.
SlackHandler wraps it as a logging.Handler.
"""

import dataclasses
import logging
import os
import socket
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .builder import SlackMessageBuilder
from .composer import compose_payload
from .config import SlackConfig, SlackConfigurationError
from .types import LogEvent


logger = logging.getLogger(__name__)

PACKAGE_LOGGER = __name__.split(".")[0]

# Loggers written to while a message is being sent.
IGNORED_LOGGERS = (PACKAGE_LOGGER, "urllib3", "requests")

CompletionCallback = Callable[[logging.LogRecord, Optional[Exception]], None]

# Attributes every LogRecord has; anything else came from `extra=`.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _process_name() -> str:
    return Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else "python"


def _is_ignored_logger(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in IGNORED_LOGGERS)


def default_fields() -> Dict[str, Callable[[LogEvent], Any]]:
    """Process identity fields added when nothing else is configured."""
    return {
        "Process Name": lambda event: f"{socket.gethostname()}\\{_process_name()}",
        "Process PID": lambda event: os.getpid(),
    }


def resolve_properties(event: LogEvent, config: SlackConfig) -> Dict[str, Any]:
    """
    Evaluate configured field extractors and merge in event properties.

    Configured fields come first; an event property with the same name
    replaces the configured value. A failing extractor is skipped.
    """
    properties: Dict[str, Any] = {}

    for name, extractor in config.fields.items():
        try:
            properties[name] = extractor(event)
        except Exception as e:
            logger.warning(f"Field extractor '{name}' failed: {type(e).__name__}: {e}")

    if config.include_event_properties:
        properties.update(event.properties)

    return properties


def deliver(event: LogEvent, config: SlackConfig) -> Optional[Exception]:
    """
    Send one log event to Slack.

    Args:
        event: The log event to deliver
        config: A validated Slack configuration

    Returns:
        None on success (or when delivery is disabled), otherwise the
        exception that prevented delivery

    Raises:
        SlackConfigurationError: If the webhook URL or proxy is invalid
    """
    if not config.enabled:
        logger.debug("Slack delivery skipped (disabled)")
        return None

    errors = []

    try:
        payload = compose_payload(event, resolve_properties(event, config), config.compact)

        builder = SlackMessageBuilder.build(config.webhook_url, config.proxy, config.timeout) \
            .on_error(errors.append) \
            .with_message(payload.text)

        for attachment in payload.attachments:
            builder.add_attachment(attachment)

        builder.send()
    except SlackConfigurationError:
        raise
    except Exception as e:
        logger.error(f"Slack delivery failed unexpectedly: {type(e).__name__}: {e}")
        return e

    return errors[0] if errors else None


def record_to_event(record: logging.LogRecord, text: str) -> LogEvent:
    """
    Convert a LogRecord into a LogEvent.

    Args:
        record: The stdlib log record
        text: The record rendered by the handler's formatter

    Returns:
        LogEvent carrying the record's `extra` attributes as properties
    """
    properties = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }

    exception = None
    if record.exc_info and record.exc_info[1] is not None:
        exception = record.exc_info[1]

    return LogEvent(
        text=text,
        level=record.levelno,
        message=str(record.msg),
        properties=properties,
        exception=exception,
    )


class SlackHandler(logging.Handler):
    """
    logging.Handler that posts every record to a Slack webhook.

    The configuration is validated on construction: an invalid webhook
    URL or proxy raises SlackConfigurationError and no handler is created.
    Delivery failures are never raised; they are passed to on_complete.

    Usage:
        handler = SlackHandler(load_config_from_env(), level=logging.ERROR)
        logging.getLogger().addHandler(handler)
    """

    def __init__(
        self,
        config: SlackConfig,
        on_complete: Optional[CompletionCallback] = None,
        level: int = logging.NOTSET,
    ):
        super().__init__(level=level)
        config.validate()

        if not config.compact and not config.fields:
            config = dataclasses.replace(config, fields=default_fields())

        self._config = config
        self._on_complete = on_complete
        self._local = threading.local()

        logger.info(
            f"SlackHandler initialized (compact={config.compact}, "
            f"proxy={'on' if config.proxy else 'off'}, enabled={config.enabled})"
        )

    @property
    def config(self) -> SlackConfig:
        return self._config

    def emit(self, record: logging.LogRecord) -> None:
        # Log output of the delivery stack would loop back into Slack.
        if _is_ignored_logger(record.name) or getattr(self._local, "sending", False):
            return

        try:
            text = self.format(record) if self.formatter else record.getMessage()
            event = record_to_event(record, text)
        except Exception:
            self.handleError(record)
            return

        self._local.sending = True
        try:
            error = deliver(event, self._config)
        finally:
            self._local.sending = False

        if self._on_complete is not None:
            try:
                self._on_complete(record, error)
            except Exception:
                self.handleError(record)
