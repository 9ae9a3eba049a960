"""Event reporting for the resolution engine and its providers.

Resolvers never write to the console or a global logger directly. They
describe what happened as a :class:`ResolutionEvent` and hand it to an
injected :class:`EventReporter`. The default :class:`LoggingReporter`
forwards events to the standard ``logging`` module; tests can pass a
:class:`RecordingReporter` and assert on the collected events.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol


class EventKind(str, Enum):
    """What a reported event is about."""

    LOOKUP = "lookup"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    CONFIGURATION = "configuration"
    CACHE_HIT = "cache_hit"
    CACHE_WRITE = "cache_write"
    UNRESOLVED = "unresolved"


# Severity each kind is logged at by LoggingReporter
_LEVELS = {
    EventKind.LOOKUP: logging.DEBUG,
    EventKind.RESOLVED: logging.DEBUG,
    EventKind.NOT_FOUND: logging.DEBUG,
    EventKind.PROVIDER_ERROR: logging.WARNING,
    EventKind.CONFIGURATION: logging.DEBUG,
    EventKind.CACHE_HIT: logging.DEBUG,
    EventKind.CACHE_WRITE: logging.DEBUG,
    EventKind.UNRESOLVED: logging.INFO,
}


@dataclass(frozen=True)
class ResolutionEvent:
    """A single thing that happened while resolving a package.

    Attributes:
        kind: Event category.
        source: Name of the component that reported it (provider display
            name, "cache", or "engine").
        package_id: Package being resolved.
        version: Version being resolved.
        message: Short human-readable description.
        details: Extra structured data (status codes, URLs, license ids).
    """

    kind: EventKind
    source: str
    package_id: str
    version: str
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


class EventReporter(Protocol):
    """Anything that can receive resolution events."""

    def report(self, event: ResolutionEvent) -> None:
        ...


class LoggingReporter:
    """Reporter that writes events to a ``logging.Logger``."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("license_resolver")

    def report(self, event: ResolutionEvent) -> None:
        level = _LEVELS.get(event.kind, logging.DEBUG)
        if event.details:
            self.logger.log(
                level,
                "[%s] %s %s: %s %s",
                event.source,
                event.package_id,
                event.version,
                event.message or event.kind.value,
                event.details,
            )
        else:
            self.logger.log(
                level,
                "[%s] %s %s: %s",
                event.source,
                event.package_id,
                event.version,
                event.message or event.kind.value,
            )


class RecordingReporter:
    """Reporter that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[ResolutionEvent] = []

    def report(self, event: ResolutionEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[ResolutionEvent]:
        """Return the recorded events of a given kind, in order."""
        return [event for event in self.events if event.kind == kind]
