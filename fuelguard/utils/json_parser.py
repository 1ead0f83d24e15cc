# fuelguard/utils/json_parser.py
"""
Helpers for QR payload JSON.
Payloads are serialised compactly with a fixed key order so that the
registry key (HMAC of the whole string) is reproducible.
"""

import json
from typing import Optional, Union


def safe_parse_json(raw: Union[str, bytes]) -> Optional[dict]:
    """Parse a JSON object safely. Returns None on error or non-object JSON."""
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def dump_compact(payload: dict) -> str:
    """Serialise without whitespace, preserving insertion order."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
