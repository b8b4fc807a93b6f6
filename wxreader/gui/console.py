from __future__ import annotations

import time
from typing import Dict

# Console output of the reader site itself, none of it actionable from here.
_NOISY_EXACT = {
    "error",
    "[object object]",
}
_NOISY_MARKERS = (
    "unrecognized feature: 'attribution-reporting'",
    "unrecognized feature: 'browsing-topics'",
    "deprecated api for given entry type",
    "window.webkitstorageinfo is deprecated",
    "was preloaded using link preload but not used within a few seconds from the window's load event",
    "the source list for content security policy directive",
    "contains an invalid source",
    "access to font at",
    "has been blocked by cors policy",
    "no 'access-control-allow-origin' header is present on the requested resource",
    "failed to load resource: net::err_blocked_by_client",
    "[report only]",
    "resizeobserver loop limit exceeded",
    "resizeobserver loop completed with undelivered notifications",
)


def is_ignorable_js_console_message(message: str) -> bool:
    value = str(message or "").strip().lower()
    if not value:
        return True
    if value in _NOISY_EXACT:
        return True
    return any(marker in value for marker in _NOISY_MARKERS)


class RepeatFilter:
    """Let each distinct message through ``limit`` times, then mute it.

    ``admit`` returns ``"show"``, ``"suppress-notice"`` (the first muted
    occurrence) or ``"drop"``.
    """

    def __init__(self, limit: int = 3, cleanup_after_s: float = 120.0, max_entries: int = 500):
        self.limit = limit
        self.cleanup_after_s = cleanup_after_s
        self.max_entries = max_entries
        self._seen: Dict[str, int] = {}
        self._last_cleanup = time.monotonic()

    def _cleanup(self) -> None:
        now = time.monotonic()
        if now - self._last_cleanup < self.cleanup_after_s:
            return
        if len(self._seen) > self.max_entries:
            self._seen.clear()
        self._last_cleanup = now

    def admit(self, message: str) -> str:
        self._cleanup()
        count = self._seen.get(message, 0) + 1
        self._seen[message] = count
        if count <= self.limit:
            return "show"
        if count == self.limit + 1:
            return "suppress-notice"
        return "drop"
