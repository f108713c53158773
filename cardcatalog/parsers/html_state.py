"""
Embedded state extraction for HTML catalog pages.

Some catalog mirrors only serve rendered HTML. Their card data lives in a
hydration script block or in an assignment to a global state variable.

Note: Page structure is outside our control. A page without recognizable
embedded state is a valid (empty) outcome, never an error.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# <script id="__NEXT_DATA__" type="application/json">{...}</script>
NEXT_DATA_PATTERN = re.compile(
    r"<script[^>]*\bid=[\"']__NEXT_DATA__[\"'][^>]*>(.*?)</script>",
    re.DOTALL | re.IGNORECASE,
)

# window.__INITIAL_STATE__ = {...};  /  __PRELOADED_STATE__ = {...};
STATE_ASSIGNMENT_PATTERNS = (
    re.compile(r"window\.__INITIAL_STATE__\s*=\s*(?=\{)"),
    re.compile(r"__PRELOADED_STATE__\s*=\s*(?=\{)"),
)

_decoder = json.JSONDecoder()


def extract_embedded_state(html: str) -> Any | None:
    """
    Locate and parse embedded JSON state in an HTML document.

    Markers are tried in order: hydration data script, initial state
    assignment, preloaded state assignment. The first marker that is found
    and parses cleanly wins.

    Args:
        html: Raw HTML text

    Returns:
        Parsed JSON value, or None if no marker parses
    """
    match = NEXT_DATA_PATTERN.search(html)
    if match:
        try:
            return json.loads(match.group(1))
        except ValueError:
            logger.debug("Hydration data script present but not valid JSON")

    for pattern in STATE_ASSIGNMENT_PATTERNS:
        match = pattern.search(html)
        if not match:
            continue
        try:
            # raw_decode stops at the end of the object literal
            state, _ = _decoder.raw_decode(html, match.end())
            return state
        except ValueError:
            logger.debug("State assignment %s present but not valid JSON", pattern.pattern)

    return None


def decode_html_payload(text: str) -> Any | None:
    """
    Decode the body of an HTML-encoded source.

    Mirrors sometimes answer with plain JSON even on HTML routes, so the
    body is tried as JSON first and then scanned for embedded state.

    Returns:
        Parsed JSON value, or None if the body carries no usable data
    """
    stripped = text.strip()
    if not stripped:
        return None

    try:
        return json.loads(stripped)
    except ValueError:
        pass

    return extract_embedded_state(text)
