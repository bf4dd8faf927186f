"""
Message Classifier - turns one Gmail message into one ApplicationRecord

Tries the AI provider first and falls back to the heuristic classifier on
any ClassificationError. Missing headers or bodies degrade to empty
strings, sentinels and a null date, so classify() never raises.
"""

import logging
from typing import Optional

from apptrack.ai.base import AIProvider, ClassificationError, DEFAULT_BODY_CHARS
from apptrack.email.body import extract_body, get_header, parse_header_date, strip_sender_address
from apptrack.heuristics import classify_heuristically
from apptrack.models import ApplicationRecord

logger = logging.getLogger(__name__)


class MessageClassifier:
    """Classify Gmail API message dicts into application records."""

    def __init__(self, provider: Optional[AIProvider] = None, body_chars: int = DEFAULT_BODY_CHARS):
        self.provider = provider
        self.body_chars = body_chars

    def classify(self, message: dict, msg_id: Optional[str] = None) -> ApplicationRecord:
        """
        Classify a single message. The message dict is only read.

        Args:
            message: Gmail message in 'full' format (id, payload.headers, payload.parts)
            msg_id: Id to use when the message itself carries none

        Returns:
            ApplicationRecord keyed by the message id
        """
        message = message or {}
        msg_id = message.get("id") or msg_id or ""
        subject = get_header(message, "Subject")
        sender_raw = get_header(message, "From")
        date = parse_header_date(get_header(message, "Date"))
        body = extract_body(message.get("payload"))

        fields = None
        if self.provider is not None:
            try:
                fields = self.provider.classify_application(subject, body[: self.body_chars], sender_raw)
            except ClassificationError as e:
                logger.warning(
                    f"AI classification unavailable for {msg_id}, using heuristics: {e}",
                    extra={"msg_id": msg_id},
                )

        if fields is None:
            fields = classify_heuristically(subject, body, sender_raw)

        record = ApplicationRecord.from_fields(
            msg_id,
            fields,
            date=date,
            original_subject=subject,
            sender=strip_sender_address(sender_raw),
        )
        logger.debug(
            f"Classified {msg_id}: {record.company_name} | {record.job_profile} | "
            f"{record.application_status.value}"
        )
        return record


def classify_message(message: dict, provider: Optional[AIProvider] = None) -> ApplicationRecord:
    """Classify one message with a throwaway MessageClassifier."""
    return MessageClassifier(provider).classify(message)
