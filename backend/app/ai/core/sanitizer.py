"""
Exam Practice Coach - Prompt Sanitizer
Neutralizes untrusted text before it is interpolated into a model prompt.
"""
import logging
import re
import unicodedata
from typing import List, Optional

logger = logging.getLogger(__name__)


# Quotes (straight, smart, backtick), C0/C1 control characters and DEL
_BREAKOUT_CHARS = re.compile(r"[\"'`‘’‚‛“”„‟\x00-\x1f\x7f-\x9f]")
_WHITESPACE_RUN = re.compile(r"\s+")

# Markers that suggest an attempt to override the surrounding instructions
INJECTION_PATTERNS = [
    (r"ignore\s+(all\s+)?(previous|above|prior|earlier)?\s*(instructions?|prompts?|rules?)", "direct_override"),
    (r"disregard\s+(everything|all|the)\s+(above|previous)", "direct_override"),
    (r"\b(system|assistant)\s*:", "role_marker"),
    (r"you\s+are\s+now\s+(in\s+)?(developer|admin|jailbreak|unrestricted)\s+mode", "role_manipulation"),
    (r"<\|.*?\|>", "token_injection"),
    (r"\[INST\]|\[/INST\]", "token_injection"),
    (r"(give|award|assign)\s+(me\s+)?(full|maximum|max|10/10)\s+(marks|score|points)", "grade_manipulation"),
]


def _strip_format_chars(text: str) -> str:
    # Zero-width and bidi control characters (Unicode category Cf)
    return "".join(ch for ch in text if unicodedata.category(ch) != "Cf")


def sanitize_prompt_text(text: Optional[str]) -> str:
    """
    Make untrusted text safe to embed inside a quoted prompt section.

    Quote characters, newlines, tabs and other control characters become a
    single space. Zero-width and bidi formatting characters are removed.
    Whitespace runs collapse to one space and the result is trimmed.
    """
    if not text:
        return ""
    cleaned = _BREAKOUT_CHARS.sub(" ", _strip_format_chars(text))
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned.strip()


def detect_injection_markers(text: Optional[str]) -> List[str]:
    """Return the categories of injection markers found in the text."""
    if not text:
        return []
    text = _strip_format_chars(text)
    found = []
    for pattern, category in INJECTION_PATTERNS:
        if category not in found and re.search(pattern, text, re.IGNORECASE):
            found.append(category)
    return found


def sanitize_fields(**fields: Optional[str]) -> dict:
    """
    Sanitize several named fields at once, logging injection markers.

    Markers are only reported; the quoting in the prompt neutralizes them.
    """
    sanitized = {}
    for name, value in fields.items():
        markers = detect_injection_markers(value)
        if markers:
            logger.warning("Possible prompt injection in %s: %s", name, ", ".join(markers))
        sanitized[name] = sanitize_prompt_text(value)
    return sanitized
