"""Lenient parsing of JSON text columns stored alongside dependency rows.

Pollers write ``check_details``, ``error`` and the contact columns as raw
JSON text.  A corrupt value must never abort graph construction, so every
parser here returns None instead of raising.
"""

from __future__ import annotations

import json
from typing import Any


def parse_json_text(text: str | None) -> Any:
    """Return the decoded value of *text*, or None if it is empty or malformed."""
    if text is None or text == "":
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def parse_json_object(text: str | None) -> dict[str, Any] | None:
    """Like parse_json_text, but only accepts a JSON object."""
    value = parse_json_text(text)
    if isinstance(value, dict):
        return value
    return None
