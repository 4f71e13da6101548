"""Title heuristics applied when a record is created without a title."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Optional
from urllib.parse import urlparse

DEFAULT_TITLES = {
    "note": "Note",
    "image": "Photo",
    "audio": "Audio Recording",
    "video": "Video Recording",
    "link": "Link",
}

MAX_DERIVED_TITLE_LENGTH = 100

_SENTENCE_END = re.compile(r"[.!?\n]")
_URL_HOST = re.compile(r"^(?:https?://)?(?:[^@\n]+@)?(?:www\.)?([^:/\n?]+)", re.IGNORECASE)


def default_title(record_type: str) -> str:
    return DEFAULT_TITLES.get(record_type, "Record")


def title_from_text(text: str, record_type: str = "note") -> str:
    """Use the first sentence if it is a sensible length (10-100 chars)."""
    first_sentence = _SENTENCE_END.split(text.strip(), maxsplit=1)[0].strip()
    if 10 < len(first_sentence) < MAX_DERIVED_TITLE_LENGTH:
        return first_sentence
    return default_title(record_type)


def title_from_filename(filename: str, record_type: str) -> str:
    """Turn a file name into a title: my_holiday-photo.jpg -> my holiday photo."""
    stem = PurePath(filename).stem
    cleaned = re.sub(r"\s+", " ", re.sub(r"[-_]", " ", stem)).strip()
    return cleaned or default_title(record_type)


def title_from_url(url: str) -> str:
    """Domain of a URL without "www.", or a truncated URL if unparseable."""
    try:
        host: Optional[str] = urlparse(url.strip()).hostname
    except ValueError:
        # Malformed netloc, e.g. an unclosed IPv6 bracket
        host = None
    if host:
        return re.sub(r"^www\.", "", host)

    match = _URL_HOST.match(url.strip())
    if match:
        return match.group(1)
    return url[:30] + "..." if len(url) > 30 else url


def truncate_title(title: str) -> str:
    if len(title) > MAX_DERIVED_TITLE_LENGTH:
        return title[:MAX_DERIVED_TITLE_LENGTH - 3] + "..."
    return title


def derive_title(record_type: str, content: str = "", file_name: Optional[str] = None) -> str:
    """Pick a title for a new record from whatever it carries."""
    if file_name:
        title = title_from_filename(file_name, record_type)
    elif record_type == "link" and content.strip():
        title = title_from_url(content)
    elif content.strip():
        title = title_from_text(content, record_type)
    else:
        title = default_title(record_type)
    return truncate_title(title)
