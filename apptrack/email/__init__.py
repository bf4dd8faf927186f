"""
Email Package - Gmail access and message decoding

Usage:
    from apptrack.email import GmailClient, extract_body

    client = GmailClient.from_access_token(token)
    ids = client.search_messages("subject:(job OR application)", max_results=100)
    message = client.get_message(ids[0])
    body = extract_body(message.get("payload"))
"""

from .client import (
    GmailClient,
    MailProviderError,
    AuthenticationError,
    SCOPES,
)

from .body import (
    extract_body,
    decode_part_data,
    get_header,
    parse_header_date,
    strip_sender_address,
    sender_address,
)

__all__ = [
    # Client
    "GmailClient",
    "MailProviderError",
    "AuthenticationError",
    "SCOPES",
    # Body and headers
    "extract_body",
    "decode_part_data",
    "get_header",
    "parse_header_date",
    "strip_sender_address",
    "sender_address",
]
