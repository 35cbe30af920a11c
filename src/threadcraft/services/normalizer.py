"""LLM response normalization.

Model output is untrusted text. These functions turn it into the fixed
response shapes and never raise.

Recovery ladder (first success wins):
    1. Parse the raw text as JSON.
    2. Strip code fences and a leading ``json:`` label, then parse.
    3. Parse the substring between the first ``{`` and the last ``}``.
    4. Give up and use the hand-authored default payload.

Only a JSON *object* counts as success. A parsed object is merged over a
full-field default so omitted or wrong-typed fields still come out with
the neutral value for their type.
"""

import copy
import json
import re
from typing import Any

MAX_THREAD_LENGTH = 5

CODE_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*")
LEADING_LABEL_PATTERN = re.compile(r"^\s*json\s*:?\s*(?=[{\[])", re.I)

DEFAULT_SOCIAL_CONTENT = {
    "thread": [
        "Hook about the article. Key insight. 🧵 1/4",
        "Insight #1 with value. 🧵 2/4",
        "Insight #2 with value. 🧵 3/4",
        "CTA. [URL] @account1 @account2 @account3 #tag1 #tag2 🧵 4/4",
    ],
    "linkedin": (
        "🚀 Hook about the article.\n\n"
        "💡 Insight 1 with actionable value\n"
        "📈 Insight 2 with practical application\n"
        "🎯 Insight 3 with clear takeaway\n\n"
        "What are your thoughts on this?\n\n"
        "Read the full article: [URL]\n\n"
        "#marketing #content #growth"
    ),
}

DEFAULT_ANALYSIS = {
    "metadata": {
        "title": "",
        "authors": [],
        "venue_year": "",
        "link": "",
        "code_or_data": "",
    },
    "core_contribution": "",
    "innovations_methodology": [],
    "significance": {
        "classification": "",
        "justification": "",
    },
    "limitations": [],
    "open_questions": [],
    "plain_english_summary": "",
}


def _loads_object(text: str) -> dict | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def strip_wrappers(text: str) -> str:
    """Remove code-fence markers and a leading "json:" label."""
    stripped = CODE_FENCE_PATTERN.sub("", text).strip()
    return LEADING_LABEL_PATTERN.sub("", stripped, count=1).strip()


def parse_json_object(raw: str | None) -> dict | None:
    """Run the recovery ladder and return the first parsed object.

    Args:
        raw: Model output text

    Returns:
        The parsed dict, or None when every attempt failed
    """
    if not raw or not isinstance(raw, str):
        return None

    parsed = _loads_object(raw)
    if parsed is not None:
        return parsed

    parsed = _loads_object(strip_wrappers(raw))
    if parsed is not None:
        return parsed

    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        return _loads_object(raw[start : end + 1])
    return None


def scrub_text(value: str) -> str:
    """Replace lone UTF-16 surrogates (e.g. from a cut-off ``\\ud83d`` escape) with "?".

    ``json.loads`` accepts such escapes but the result cannot be encoded as UTF-8.
    """
    return value.encode("utf-8", "replace").decode("utf-8")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _as_text_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [scrub_text(value)] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [
        _as_text(item)
        for item in value
        if isinstance(item, (str, int, float)) and not isinstance(item, bool)
    ]


def _merge(defaults: dict, parsed: dict) -> dict:
    # Keep the defaults' keys and types; nested dicts merge recursively
    merged = {}
    for key, default in defaults.items():
        value = parsed.get(key, default)
        if isinstance(default, dict):
            merged[key] = _merge(default, value if isinstance(value, dict) else {})
        elif isinstance(default, list):
            merged[key] = _as_text_list(value)
        else:
            merged[key] = _as_text(value)
    return merged


def normalize_social(raw: str | None) -> tuple[dict, bool]:
    """Normalize thread/LinkedIn output.

    Args:
        raw: Model output text

    Returns:
        (payload with "thread" and "linkedin", True when the default payload was used)
    """
    parsed = parse_json_object(raw)
    if parsed is None:
        return copy.deepcopy(DEFAULT_SOCIAL_CONTENT), True

    result = _merge({"thread": [], "linkedin": ""}, parsed)
    result["thread"] = result["thread"][:MAX_THREAD_LENGTH]
    return result, False


def normalize_analysis(raw: str | None, link: str | None = None) -> tuple[dict, bool]:
    """Normalize paper-analysis output.

    Args:
        raw: Model output text
        link: Canonical source URL; when given it replaces metadata.link

    Returns:
        (payload matching the analysis schema, True when the default payload was used)
    """
    parsed = parse_json_object(raw)
    fallback = parsed is None
    result = _merge(DEFAULT_ANALYSIS, parsed or {})
    if link:
        result["metadata"]["link"] = link
    return result, fallback
