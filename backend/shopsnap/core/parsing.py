"""
Normalization of Gemini's free-form text answers.

Gemini is asked for JSON (or a bare URL) but nothing guarantees it complies,
so the parsers here never raise on bad model output: they return a
ParseResult and let the caller decide which API error to produce.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

# ```json / ``` markers plus the newline that usually sits next to them
_FENCE_RE = re.compile(r"```json\n?|\n?```", re.IGNORECASE)

# http(s) URL that mentions amazon anywhere (amazon.com, amazon.co.uk, ...)
_AMAZON_URL_RE = re.compile(r"https?://[^\s\"'<>()\[\]]*amazon[^\s\"'<>()\[\]]*", re.IGNORECASE)

# Sentence punctuation that trails a URL in prose ("... at https://amazon.com/dp/B1.")
_TRAILING_PUNCT = ".,;:!?"


@dataclass(frozen=True)
class ParseResult:
    ok: bool
    raw: str
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any, raw: str) -> "ParseResult":
        return cls(ok=True, raw=raw, value=value)

    @classmethod
    def failure(cls, error: str, raw: str) -> "ParseResult":
        return cls(ok=False, raw=raw, error=error)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_output(text: str) -> ParseResult:
    """
    Strip markdown fences and parse what is left as JSON.
    The raw (unstripped) text is kept on the result for error responses.
    """
    cleaned = strip_code_fences(text)
    try:
        return ParseResult.success(json.loads(cleaned), raw=text)
    except (json.JSONDecodeError, TypeError) as e:
        return ParseResult.failure(f"Invalid JSON: {e}", raw=text)


def extract_amazon_url(text: str) -> ParseResult:
    """
    Best-effort: first http(s) URL containing "amazon" wins; if there is none,
    the whole trimmed text is taken as the answer. Either way the result must
    mention amazon, otherwise this is a failure.
    """
    cleaned = strip_code_fences(text)

    m = _AMAZON_URL_RE.search(cleaned)
    candidate = m.group(0).rstrip(_TRAILING_PUNCT) if m else cleaned

    if "amazon" not in candidate.lower():
        return ParseResult.failure("No Amazon URL found", raw=text)
    return ParseResult.success(candidate, raw=text)
