"""
Message body and header helpers for Gmail API message payloads.

Only text/plain content is extracted. HTML-only messages yield an empty
body; no HTML-to-text conversion is attempted.
"""

import base64
import binascii
import logging
import re
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Optional

logger = logging.getLogger(__name__)


def decode_part_data(data: str) -> str:
    """
    Decode Gmail's base64url part data into text.

    Returns an empty string when the data cannot be decoded.
    """
    if not data:
        return ""
    missing_padding = len(data) % 4
    if missing_padding:
        data += "=" * (4 - missing_padding)
    try:
        return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Skipping undecodable MIME part: {e}")
        return ""


def extract_body(part: Optional[dict]) -> str:
    """
    Flatten a MIME part tree into plain text.

    A text/plain part with inline data is decoded directly. Otherwise each
    child part is walked in order and every text/plain result is joined
    with newlines. Parts without text/plain content contribute nothing.

    Args:
        part: Gmail message payload (or any nested part), may be None

    Returns:
        Decoded plain-text body, or "" if there is none
    """
    if not part:
        return ""

    data = (part.get("body") or {}).get("data")
    if part.get("mimeType") == "text/plain" and data:
        return decode_part_data(data)

    texts = []
    for child in part.get("parts") or []:
        text = extract_body(child)
        if text:
            texts.append(text)
    return "\n".join(texts)


def get_header(message: dict, name: str) -> str:
    """Return the first header value matching name (case-insensitive)."""
    wanted = name.lower()
    for header in (message.get("payload") or {}).get("headers") or []:
        if (header.get("name") or "").lower() == wanted:
            return header.get("value") or ""
    return ""


def parse_header_date(value: str) -> Optional[str]:
    """
    Convert an RFC 2822 Date header into an ISO-8601 UTC timestamp.

    "Mon, 15 Jan 2024 10:30:00 -0500" -> "2024-01-15T15:30:00.000Z"

    Returns None when the header is empty or unparsable.
    """
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
        if dt is None:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        # Offsets near the calendar edges can push the UTC value out of range
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def strip_sender_address(sender_raw: str) -> str:
    """
    Drop the angle-bracketed address from a From header.

    "Acme Careers <jobs@acme.com>" -> "Acme Careers"
    """
    return re.sub(r"<[^>]+>", "", sender_raw or "", count=1).strip()


def sender_address(sender_raw: str) -> str:
    """
    Extract the bare email address from a From header.

    "Acme Careers <jobs@acme.com>" -> "jobs@acme.com"
    """
    match = re.search(r"<([^>]+)>", sender_raw or "")
    if match:
        return match.group(1).strip()
    return (sender_raw or "").strip()
