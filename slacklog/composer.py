"""
Payload composition for Slack log messages.

Turns a log event plus its contextual properties into a Payload with a
properties attachment and, outside compact mode, an exception attachment.
Pure data assembly: no serialization or network access.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from .types import Attachment, Field, LogEvent, Payload, exception_type_name


# Slack attachment colors
class Colors:
    """Severity colors understood by Slack attachments."""
    WARNING = "warning"
    DANGER = "danger"
    INFO = "#2a80b9"
    DEFAULT = "#cccccc"


LEVEL_COLOR_MAP: Dict[int, str] = {
    logging.WARNING: Colors.WARNING,
    logging.ERROR: Colors.DANGER,
    logging.CRITICAL: Colors.DANGER,
    logging.INFO: Colors.INFO,
}

# Level names used by other logging ecosystems
_LEVEL_ALIASES = {
    "TRACE": 5,
    "WARN": logging.WARNING,
    "FATAL": logging.CRITICAL,
}

NOT_AVAILABLE = "N/A"


def normalize_level(level: Union[int, str]) -> Optional[int]:
    """
    Convert a level name or number to a stdlib logging level number.

    Args:
        level: Numeric level or a name such as "Warn", "error", "FATAL"

    Returns:
        The numeric level, or None for an unknown name
    """
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if name in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[name]

    value = logging.getLevelName(name)
    return value if isinstance(value, int) else None


def get_color_for_level(level: Union[int, str]) -> str:
    """Map a severity to its attachment color (gray when unmapped)."""
    return LEVEL_COLOR_MAP.get(normalize_level(level), Colors.DEFAULT)


def new_payload(text: str) -> Payload:
    return Payload(text=text)


def add_attachment(payload: Payload, attachment: Attachment) -> Payload:
    """Append an attachment in place; addition order is display order."""
    payload.attachments.append(attachment)
    return payload


def build_properties_attachment(
    event: LogEvent,
    properties: Mapping[str, Any],
) -> Optional[Attachment]:
    """
    Build the "properties" attachment for an event.

    Every entry with a non-empty key and a non-empty string value becomes
    a short field. Entries with empty keys or None/empty values are skipped.

    Args:
        event: The log event (provides fallback text and severity)
        properties: Name/value pairs to render

    Returns:
        The attachment, or None if no entry survives
    """
    attachment = Attachment(fallback=event.message, color=get_color_for_level(event.level))

    for key, value in properties.items():
        if not key:
            continue

        if value is None:
            continue

        text = str(value)
        if not text:
            continue

        attachment.fields.append(Field(title=str(key), value=text, short=True))

    if not attachment.fields:
        return None

    return attachment


def build_exception_attachment(event: LogEvent) -> Optional[Attachment]:
    """
    Build the "exception" attachment for an event.

    Returns:
        An attachment with a single stack trace field, or None if the
        event carries no exception
    """
    exception = event.exception
    if exception is None:
        return None

    attachment = Attachment(
        fallback=str(exception) or exception_type_name(exception),
        color=get_color_for_level(event.level),
    )
    attachment.fields.append(Field(
        title=f"Type: {exception_type_name(exception)}",
        value=event.get_stack_trace() or NOT_AVAILABLE,
        short=False,
    ))
    return attachment


def compose_payload(
    event: LogEvent,
    properties: Mapping[str, Any],
    compact: bool = False,
) -> Payload:
    """
    Compose the full payload for a log event.

    The properties attachment (if any) precedes the exception attachment.
    Compact mode never includes exception detail.
    """
    payload = new_payload(event.text)

    properties_attachment = build_properties_attachment(event, properties)
    if properties_attachment is not None:
        add_attachment(payload, properties_attachment)

    if not compact:
        exception_attachment = build_exception_attachment(event)
        if exception_attachment is not None:
            add_attachment(payload, exception_attachment)

    return payload
