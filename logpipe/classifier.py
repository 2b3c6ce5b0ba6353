"""Origin-tag classification: decides which file sink a record belongs to.

Backend records come from native code, whose origin tag is a logger/module
name such as ``postium_mail.accounts``. Records from the embedded UI carry a
bracketed tag such as ``[webview]``. Anything unrecognized is treated as
native rather than dropped.
"""

from enum import Enum

DEFAULT_BACKEND_PREFIXES = ("postium_mail", "tauri", "logpipe")
FRONTEND_MARKER = "["


class Route(Enum):
    BACKEND = "backend"
    FRONTEND = "frontend"
    NEITHER = "neither"


def classify(origin_tag: str, backend_prefixes=DEFAULT_BACKEND_PREFIXES,
             frontend_marker: str = FRONTEND_MARKER) -> Route:
    """Return BACKEND or FRONTEND for an origin tag. Never returns NEITHER."""
    if origin_tag.startswith(tuple(backend_prefixes)):
        return Route.BACKEND
    if not origin_tag.startswith(frontend_marker):
        return Route.BACKEND
    return Route.FRONTEND


class SinkFilter(Enum):
    """Per-sink filter strategy."""

    BACKEND = "backend"
    FRONTEND = "frontend"
    ALL = "all"

    def accepts(self, origin_tag: str, backend_prefixes=DEFAULT_BACKEND_PREFIXES) -> bool:
        if self is SinkFilter.ALL:
            return True
        return classify(origin_tag, backend_prefixes).value == self.value
