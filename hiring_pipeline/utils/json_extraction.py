"""
Pull a JSON document out of free-form model output.

Models wrap JSON in prose or code fences often enough that a plain
json.loads on the whole text is not reliable.
"""

import json
from typing import Any


class JsonExtractionError(ValueError):
    """Raised when no decodable JSON object or array is present."""


def extract_json_payload(text: str) -> Any:
    """
    Decode the span from the first opening brace/bracket to the last
    matching closer.
    """
    if not text:
        raise JsonExtractionError("Response was empty")

    first_brace = text.find("{")
    first_square = text.find("[")
    if first_brace == -1:
        start = first_square
    elif first_square == -1:
        start = first_brace
    else:
        start = min(first_brace, first_square)

    if start == -1:
        raise JsonExtractionError("Response did not contain a JSON object or array")

    end_char = "}" if text[start] == "{" else "]"
    end = text.rfind(end_char)
    if end < start:
        raise JsonExtractionError("Response contained an incomplete JSON structure")

    raw = text[start:end + 1]
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise JsonExtractionError(f"Response contained malformed JSON: {exc.msg}") from exc
