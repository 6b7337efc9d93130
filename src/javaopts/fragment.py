"""Fragment model: one contributor's share of the final JAVA_OPTS value."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
import re

from javaopts.errors import FragmentError

MIN_PRIORITY = 0
MAX_PRIORITY = 99

FRAGMENT_SUFFIX = ".opts"

_NAME_INVALID = re.compile(r"[^a-z0-9_]+")
_FILENAME_PATTERN = re.compile(r"^(?P<priority>\d{2})_(?P<name>[a-z0-9_]+)\.opts$")


class Priority(IntEnum):
    """Well-known contributor priorities (lower runs first).

    Values are fixed so that fragments written by separately released
    plugins keep a stable relative order. ``USER`` is the maximum and is
    reserved for end-user configuration so it always applies last.
    """

    JRE = 5
    APP_DYNAMICS = 11
    ASPECTJ_WEAVER = 12
    AZURE_APPLICATION_INSIGHTS = 13
    CHECKMARX_IAST = 14
    CONTAINER_SECURITY_PROVIDER = 17
    CONTRAST_SECURITY = 18
    ELASTIC_APM = 19
    DATADOG = 19  # shares a slot with ELASTIC_APM; names break the tie
    DEBUG = 20
    GOOGLE_STACKDRIVER_DEBUGGER = 21
    GOOGLE_STACKDRIVER_PROFILER = 22
    JACOCO = 26
    INTROSCOPE = 27
    JAVA_MEMORY_ASSISTANT = 28
    JMX = 29
    JPROFILER = 30
    JREBEL = 31
    LUNA_SECURITY_PROVIDER = 32
    NEW_RELIC = 35
    OPEN_TELEMETRY = 36
    RIVERBED_APPINTERNALS = 37
    PROTECT_APP_SECURITY_PROVIDER = 38
    SEALIGHTS = 39
    SEEKER_SECURITY_PROVIDER = 40
    SKY_WALKING = 41
    SPLUNK_OTEL = 42
    CF_METRICS_EXPORTER = 43
    YOUR_KIT = 45
    TAKIPI = 46
    USER = MAX_PRIORITY


def sanitize_name(name: str) -> str:
    """Normalize a contributor name into a filename-safe slug.

    Lowercases, collapses every run of characters outside ``[a-z0-9_]``
    into a single ``_`` and strips leading/trailing underscores.
    """
    return _NAME_INVALID.sub("_", name.strip().lower()).strip("_")


@dataclass(frozen=True, order=True)
class Fragment:
    """Immutable contribution of one plugin to the assembled options.

    Ordering compares ``(priority, name)`` only, which is the store's
    iteration order.
    """

    priority: int
    name: str
    content: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        """Validate the priority range and normalize the name."""
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise FragmentError(
                f"Fragment priority must be an integer, got {self.priority!r}"
            )
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise FragmentError(
                f"Fragment priority {self.priority} outside "
                f"{MIN_PRIORITY}..{MAX_PRIORITY}",
                hint=f"Use Priority.USER ({MAX_PRIORITY}) for end-user overrides.",
            )
        if not isinstance(self.content, str):
            raise FragmentError(
                f"Fragment content must be a string, got {type(self.content).__name__}"
            )
        slug = sanitize_name(self.name) if isinstance(self.name, str) else ""
        if not slug:
            raise FragmentError(f"Invalid fragment name: {self.name!r}")
        # IntEnum members are stored as plain ints so equality and repr stay simple
        object.__setattr__(self, "priority", int(self.priority))
        object.__setattr__(self, "name", slug)

    @property
    def key(self) -> str:
        """Sortable identifier, e.g. ``05_jre``."""
        return f"{self.priority:02d}_{self.name}"

    @property
    def filename(self) -> str:
        """On-disk file name, e.g. ``05_jre.opts``."""
        return self.key + FRAGMENT_SUFFIX


def parse_filename(filename: str) -> tuple[int, str] | None:
    """Return ``(priority, name)`` for a fragment file name, else None."""
    m = _FILENAME_PATTERN.match(filename)
    if m is None:
        return None
    return int(m.group("priority")), m.group("name")
