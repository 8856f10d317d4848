"""
Normalization for list-valued event fields (tags, agenda).

Stored documents may hold a real list, a JSON-encoded list, or a bare
string. Everything read from storage goes through ``coerce_string_list``;
everything written goes through ``clean_string_list``.
"""

import json
from typing import Any, List


def coerce_string_list(value: Any) -> List[str]:
    """Decode a stored list field into a list of strings"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return [value]
        if isinstance(decoded, list):
            return [str(item) for item in decoded]
        return [value]
    return [str(value)]


def clean_string_list(values: List[str], unique: bool = False) -> List[str]:
    """Strip items, drop blanks and optionally duplicates, keeping order"""
    cleaned: List[str] = []
    for item in values:
        item = str(item).strip()
        if not item or (unique and item in cleaned):
            continue
        cleaned.append(item)
    return cleaned


def parse_json_list(raw: str) -> List[str]:
    """Parse a form field holding a JSON array of strings.

    Raises ValueError when the payload is not a JSON array of strings.
    """
    decoded = json.loads(raw)
    if not isinstance(decoded, list) or not all(isinstance(item, str) for item in decoded):
        raise ValueError("Expected a JSON array of strings")
    return decoded
