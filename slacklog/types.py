"""
Type definitions for Slack log delivery.

Defines the webhook message structures (payload, attachments, fields)
and the inbound log event record.
"""

import json
import traceback
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


@dataclass
class Field:
    """A single key/value line inside an attachment."""
    title: Optional[str]
    value: str
    short: bool = False

    def to_dict(self) -> dict:
        result = {}
        if self.title is not None:
            result["title"] = self.title
        result["value"] = self.value
        result["short"] = self.short
        return result


@dataclass
class Attachment:
    """
    A visually grouped block within a Slack message.

    The color is either a hex value or one of Slack's named tokens
    ("good", "warning", "danger").
    """
    fallback: str
    color: str
    fields: List[Field] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "fallback": self.fallback,
            "color": self.color,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass
class Payload:
    """
    One outbound Slack message.

    Attachments are rendered in the order they were added.
    """
    text: str = ""
    attachments: List[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the incoming-webhook JSON object."""
        return {
            "text": self.text,
            "attachments": [a.to_dict() for a in self.attachments],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass
class LogEvent:
    """
    A log event handed over by the host logging framework.

    Attributes:
        text: Rendered message text
        level: Numeric severity (stdlib logging levels)
        message: Raw, unrendered message (defaults to text)
        properties: Contextual name/value pairs
        exception: Exception attached to the event, if any
        stack_trace: Explicit stack trace; derived from the exception
            traceback when omitted
    """
    text: str
    level: int
    message: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    stack_trace: Optional[str] = None

    def __post_init__(self):
        if self.message is None:
            self.message = self.text

    def get_stack_trace(self) -> Optional[str]:
        """Return the stack trace text, or None if none is available."""
        if self.stack_trace:
            return self.stack_trace

        tb = getattr(self.exception, "__traceback__", None)
        if tb is None:
            return None

        return "".join(traceback.format_tb(tb)).rstrip() or None


def exception_type_name(exception: BaseException) -> str:
    """Return the qualified type name of an exception (builtins unqualified)."""
    cls = type(exception)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"
