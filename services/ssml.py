import logging
import re
from enum import Enum


logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 4000
DEFAULT_MAX_BYTES = 5000
TRUNCATION_CHUNK = 100
ELLIPSIS = "..."

PARAGRAPH_PAUSE_MS = 600
LINE_BREAK_PAUSE_MS = 300


class OutputMode(str, Enum):
    SSML = "ssml"
    TEXT = "text"


# Applied once, in table order: "&amp;amp;" decodes to "&amp;", not "&".
HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)

PARAGRAPH_CLOSE = re.compile(r"</p>", re.IGNORECASE)
LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
# A period already ends the sentence, don't add a second one in text mode.
PUNCTUATED_BREAK = re.compile(r"([.!?])\s*(?:</p>|<br\s*/?>)", re.IGNORECASE)
ANY_TAG = re.compile(r"<[^>]*>")


def cut_text(text: str, limit: int) -> str:
    """
    Keep the first ``limit`` characters of ``text``, minus any tag the cut
    lands inside.

    The cut is inside a tag when the kept part ends with an unclosed ``<``
    whose ``>`` follows right after the cut, i.e. exactly the span ANY_TAG
    would have matched in the uncut text. A ``<`` that is never closed is
    plain text and stays.
    """
    head = text[:max(limit, 0)]
    start = head.rfind("<")
    if start == -1 or ">" in head[start:]:
        return head
    rest = text[len(head):]
    close = rest.find(">")
    if close != -1 and "<" not in rest[:close]:
        return head[:start]
    return head


def decode_entities(text: str) -> str:
    for entity, literal in HTML_ENTITIES:
        text = text.replace(entity, literal)
    return text


def pause_tag(milliseconds: int) -> str:
    return f'<break time="{milliseconds}ms"/>'


def map_structure(text: str, mode: OutputMode = OutputMode.SSML) -> str:
    """Turn paragraph and line breaks into pauses and drop every other tag."""
    if mode == OutputMode.SSML:
        # Pause tags are parked behind placeholders so the tag stripper keeps them.
        text = PARAGRAPH_CLOSE.sub("\x00p\x00", text)
        text = LINE_BREAK.sub("\x00br\x00", text)
        text = ANY_TAG.sub("", text)
        text = text.replace("\x00p\x00", pause_tag(PARAGRAPH_PAUSE_MS))
        return text.replace("\x00br\x00", pause_tag(LINE_BREAK_PAUSE_MS))

    text = PUNCTUATED_BREAK.sub(r"\1 ", text)
    text = PARAGRAPH_CLOSE.sub(". ", text)
    text = LINE_BREAK.sub(". ", text)
    return ANY_TAG.sub("", text)


def wrap(body: str, mode: OutputMode = OutputMode.SSML) -> str:
    if mode == OutputMode.SSML:
        return f"<speak>{body}</speak>"
    return body


def byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def enforce_byte_budget(body: str, max_bytes: int, mode: OutputMode = OutputMode.SSML) -> str:
    """
    Trim ``body`` until its wrapped form fits in ``max_bytes`` UTF-8 bytes.

    Trailing chunks of TRUNCATION_CHUNK characters are removed until the
    wrapped body plus an ellipsis fits; the ellipsis is then appended.
    Returns the body unchanged when it already fits.
    """
    if byte_length(wrap(body, mode)) <= max_bytes:
        return body

    original_size = byte_length(body)
    while body and byte_length(wrap(body + ELLIPSIS, mode)) > max_bytes:
        body = cut_text(body, len(body) - TRUNCATION_CHUNK)

    if byte_length(wrap(body + ELLIPSIS, mode)) <= max_bytes:
        body += ELLIPSIS

    logger.debug(f"Trimmed body from {original_size} to {byte_length(body)} bytes (limit {max_bytes})")
    return body


def normalize_text(
    text: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_chars: int = DEFAULT_MAX_CHARS,
    mode: OutputMode = OutputMode.SSML,
) -> str:
    """
    Convert rich text into speakable input for the speech provider.

    Steps, each feeding the next:
        1. decode the six named HTML entities, once
        2. cut to ``max_chars`` characters (plus an ellipsis) before any
           pause markup exists, so no pause tag is ever cut
        3. map ``</p>`` and ``<br>`` to pauses (SSML) or periods (text) and
           strip all other tags
        4. wrap in ``<speak>`` for SSML mode
        5. trim to ``max_bytes`` UTF-8 bytes, the provider's payload limit

    Never raises for string input; empty input gives an empty body.
    """
    mode = OutputMode(mode)
    clean_text = decode_entities(text or "")

    if len(clean_text) > max_chars:
        logger.info(f"Text too long ({len(clean_text)} chars), truncating to {max_chars}")
        clean_text = cut_text(clean_text, max_chars) + ELLIPSIS

    body = map_structure(clean_text, mode).strip()
    body = enforce_byte_budget(body, max_bytes, mode)
    return wrap(body, mode)
