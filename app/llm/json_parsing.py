"""Lenient JSON extraction from model output."""

import json
from typing import Any

from app.logging.logger import Log


def strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned


def extract_json_array(raw: str) -> list[Any] | None:
    """Parse the JSON array between the first "[" and the last "]".

    Returns None when no array can be parsed. Never raises.
    """
    cleaned = strip_code_fences(raw or "")
    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start == -1 or end <= start:
        Log.warning("Model response contains no JSON array")
        return None
    try:
        parsed = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as exc:
        Log.warning(f"Invalid JSON array in model response: {exc}")
        return None
    if not isinstance(parsed, list):
        return None
    return parsed
