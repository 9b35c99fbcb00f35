"""Click actions: turn schedule events into validated action descriptors."""

from __future__ import annotations

import re

from .exceptions import InvalidURLError
from .geometry import ActionKind, ClickAction
from .models import Event, EventType

WEB_URL_PATTERN = re.compile(
    r"(https?://)?(www\.)?[-a-zA-Z0-9@:%._+~#=]{2,256}\.[a-z]{2,6}\b[-a-zA-Z0-9@:%_+.~#?&/=]*"
)

_ACTION_KINDS = {
    EventType.GOTO: ActionKind.NAVIGATE,
    EventType.POPUP: ActionKind.POPUP,
}


def deep_link_pattern(scheme: str) -> re.Pattern[str]:
    """Pattern for app-internal links such as ``obsidian://open?vault=notes&file=plan``."""
    return re.compile(rf"{re.escape(scheme)}://open\b[-a-zA-Z0-9()!@:%_+.~#?&/=]*")


def is_valid_url(url: str, deep_link_scheme: str) -> bool:
    """Check a URL against the web shape and the internal deep-link shape."""
    return bool(
        WEB_URL_PATTERN.fullmatch(url) or deep_link_pattern(deep_link_scheme).fullmatch(url)
    )


def build_click_action(event: Event, deep_link_scheme: str) -> ClickAction:
    """Build the action descriptor for a click event.

    Raises:
        InvalidURLError: If the URL has neither accepted shape
    """
    if not is_valid_url(event.url, deep_link_scheme):
        raise InvalidURLError(
            f"Error generating click action for '{event.task_id}'. "
            f"The URL is incorrect '{event.url}'"
        )
    return ClickAction(kind=_ACTION_KINDS[event.type], url=event.url)
