"""
Heuristic Classifier - deterministic extraction of company, role and status

Used whenever AI classification is unavailable. Every function here is
pure and total: it never raises and always returns usable values, falling
back to the Unknown sentinels.

Each pattern table is an ordered sequence evaluated first-match-wins.
The order is part of the contract; in particular STATUS_RULES checks
Rejected before Application Received so that a rejection which thanks the
candidate "for your interest" is still a rejection.
"""

import re
from typing import Callable, List, Optional, Pattern, Tuple

from apptrack.email.body import sender_address
from apptrack.models import (
    ApplicationStatus,
    ClassificationFields,
    DEFAULT_STATUS,
    UNKNOWN_COMPANY,
    UNKNOWN_POSITION,
)

# A capitalised word run on a single line, e.g. "Acme", "Rise Technical", "AT&T Labs"
_NAME_WORD = r"[A-Z][\w&'.\-]*"
NAME = rf"{_NAME_WORD}(?:[ \t]+(?:&[ \t]+)?{_NAME_WORD}){{0,3}}"

# Job titles allow "of"/"and" connectors, e.g. "Director of Engineering"
_TITLE_WORD = r"[A-Z][\w+#/&.()\-]*"
TITLE = rf"{_TITLE_WORD}(?:[ \t]+(?:(?:of|and|&)[ \t]+)?{_TITLE_WORD}){{0,5}}"

# End of a name/title: punctuation, a line break or end of text
_END = r"\s*[.,!?;:|()\n\-\u2013\u2014]|\s*$"

ATS_PLATFORMS = (
    "greenhouse|lever|workday|icims|smartrecruiters|ashby|jobvite|taleo"
    "|workable|bamboohr|breezy|recruitee|jazzhr"
)

# Leading words that make a capture a phrase rather than a name or title
GENERIC_WORDS = {
    "your", "you", "our", "we", "us", "this", "that", "a", "an", "re", "fwd", "fw",
    "application", "applications", "applying", "thank", "thanks", "interview",
    "update", "job", "jobs", "position", "role", "congratulations",
    "unfortunately", "hi", "hello", "dear", "welcome", "important", "action",
}

Extractor = Callable[["re.Match"], Optional[str]]


def _clean(value: str) -> str:
    return value.strip().strip(" \t.,;:|-\u2013\u2014").strip()


def _named(match: "re.Match") -> Optional[str]:
    """Default extractor: group 1, cleaned, rejected if it is a generic phrase."""
    value = _clean(match.group(1))
    if not value:
        return None
    if value.split()[0].lower() in GENERIC_WORDS:
        return None
    return value


def _as_is(match: "re.Match") -> Optional[str]:
    value = _clean(match.group(1))
    return value or None


COMPANY_PATTERNS: List[Tuple[Pattern, Extractor]] = [
    # "Interview at Acme Corp for ...", "@ Acme", "Message from Acme regarding ..."
    (
        re.compile(
            rf"(?:(?i:\bat|\bfrom)[ \t]+|(?<![\w.])@[ \t]*)({NAME}?)"
            rf"(?=[ \t]+(?i:for|position|role|about|regarding)\b|{_END})"
        ),
        _named,
    ),
    # "Acme Corp - Application Received", "Acme | Software Engineer"
    (re.compile(rf"^[ \t]*({NAME}?)[ \t]*(?:[|\u2013\u2014]|[ \t]-[ \t])"), _named),
    # "Acme Careers", "Acme Recruitment"
    (re.compile(rf"\b({NAME})[ \t]+(?:Careers|Jobs|Hiring|Recruitment|Recruiting)\b"), _named),
    # "Greenhouse on behalf of Acme"
    (
        re.compile(rf"(?i:\b(?:{ATS_PLATFORMS})[ \t]+on[ \t]+behalf[ \t]+of)[ \t]+({NAME})"),
        _named,
    ),
    # "Welcome to the Acme team", "your application with Acme Team"
    (
        re.compile(
            rf"(?i:\bwelcome[ \t]+to|\bjoining|\bapplication[ \t]+(?:at|with|for))"
            rf"[ \t]+(?:(?i:the)[ \t]+)?({NAME})[ \t]+(?i:team)\b"
        ),
        _named,
    ),
]

ROLE_PATTERNS: List[Tuple[Pattern, Extractor]] = [
    # "for the Backend Developer position at Acme", "Role: Data Engineer"
    (
        re.compile(
            rf"(?:(?i:\bfor)(?:[ \t]+(?i:the))?|(?i:\bposition|\brole):)[ \t]+({TITLE}?)"
            rf"(?=[ \t]+(?i:at|with|position|role|job)\b|{_END})"
        ),
        _named,
    ),
    # "Application Update - Backend Developer at Acme"
    (re.compile(rf"(?:[|\u2013\u2014]|[ \t]-)[ \t]*({TITLE}?)[ \t]+(?i:at)[ \t]"), _named),
    # Common engineering titles anywhere in the text
    (
        re.compile(
            r"\b((?:senior|sr\.?|junior|jr\.?|lead|staff|principal|full[- ]?stack"
            r"|front[- ]?end|back[- ]?end|software|data|devops|machine learning|cloud"
            r"|mobile|platform|qa|site reliability)"
            r"(?:[ \t]+[A-Za-z+#/\-]+){0,3}?[ \t]+(?:engineer|developer|architect))\b",
            re.IGNORECASE,
        ),
        _as_is,
    ),
    # "position of Data Analyst", "role as Product Manager", "job: Designer"
    (
        re.compile(
            rf"(?i:\b(?:position|role|job))[ \t]*(?:(?i:of|as)[ \t]+|:[ \t]*)"
            rf"(?:(?i:the|an|a)[ \t]+)?({TITLE})"
        ),
        _named,
    ),
    # "applying for the role of Product Designer"
    (
        re.compile(
            rf"(?i:\bapplying[ \t]+for)[ \t]+(?:(?i:the)[ \t]+)?(?:(?i:role[ \t]+of)[ \t]+)?({TITLE})"
        ),
        _named,
    ),
    # "Position: QA Analyst"
    (re.compile(rf"(?i:\bposition):[ \t]*({TITLE})"), _named),
]

STATUS_RULES: List[Tuple[ApplicationStatus, List[Pattern]]] = [
    (
        ApplicationStatus.REJECTED,
        [
            re.compile(r"\bregret"),
            re.compile(r"\bunfortunately\b"),
            re.compile(r"\bnot (?:be )?moving forward"),
            re.compile(r"\bwon'?t be moving forward"),
            re.compile(r"\bnot (?:been )?selected"),
            re.compile(r"\bunsuccessful\b"),
            re.compile(r"\bdecided not to (?:proceed|move forward)"),
            re.compile(r"\bthank you for your interest"),
            re.compile(r"\bother candidates?\b"),
            re.compile(r"\bbetter suited\b"),
        ],
    ),
    (
        ApplicationStatus.INTERVIEW,
        [
            re.compile(r"\binterview"),
            re.compile(r"\bnext steps?\b"),
            re.compile(r"\bmove forward\b"),
            re.compile(r"\bschedule (?:a |an |your )?(?:call|time|chat|meeting)"),
            re.compile(r"\bphone screen"),
            re.compile(r"\btechnical (?:round|screen|interview)"),
            re.compile(r"\bassessment\b"),
            re.compile(r"\bcoding (?:challenge|test|exercise)"),
            re.compile(r"\bavailability (?:for|to)\b"),
            re.compile(r"\bavailable for a (?:quick )?(?:call|chat)"),
        ],
    ),
    (
        ApplicationStatus.OFFER,
        [
            re.compile(r"\boffer\b"),
            re.compile(r"\bcongratulations\b"),
            re.compile(r"\bwelcome aboard\b"),
            re.compile(r"\bjoining\b"),
            re.compile(r"\bstart date\b"),
            re.compile(r"\bpleased to (?:offer|inform)"),
        ],
    ),
    (
        ApplicationStatus.APPLICATION_RECEIVED,
        [
            re.compile(r"\b(?:received|confirmed|submitted|reviewing|processing)\b.{0,40}\bapplication"),
            re.compile(r"\bapplication\b.{0,40}\b(?:received|confirmed|submitted|reviewing|processing)\b"),
            re.compile(r"\bthank(?:s| you) for (?:applying|your application|your interest)"),
            re.compile(r"\bapplication (?:confirmation|received|submitted)"),
        ],
    ),
]

# Mailbox-name noise inside a sender's domain, e.g. "acme-careers", "jobsacme"
_DOMAIN_NOISE = re.compile(r"careers?|jobs?|recruiting|recruitment|talent|hiring", re.IGNORECASE)
_DOMAIN_NOISE_SEGMENTS = {"hr"}


def _first_match(patterns: List[Tuple[Pattern, Extractor]], text: str) -> Optional[str]:
    for pattern, extractor in patterns:
        for match in pattern.finditer(text):
            value = extractor(match)
            if value:
                return value
    return None


def extract_company_from_domain(sender: str) -> str:
    """
    Derive a company name from the sender's email domain.

    "jobs@Acme-Careers.com" -> "Acme"
    "talent@rise-technical.co.uk" -> "Rise Technical"

    Returns:
        Company name, or "" if the sender has no usable domain
    """
    address = sender_address(sender)
    if "@" not in address:
        return ""
    label = address.rsplit("@", 1)[1].split(".")[0]
    label = _DOMAIN_NOISE.sub("", label)

    words = [
        w for w in re.split(r"[.\-]", label)
        if w and w.lower() not in _DOMAIN_NOISE_SEGMENTS
    ]
    return " ".join(w[0].upper() + w[1:] for w in words)


def extract_company(subject: str, body: str, sender: str) -> str:
    """
    Extract the hiring company from subject/body text, then the sender domain.

    Returns:
        Company name or UNKNOWN_COMPANY
    """
    text = f"{subject} {body}"
    company = _first_match(COMPANY_PATTERNS, text)
    if company:
        return company
    return extract_company_from_domain(sender) or UNKNOWN_COMPANY


def extract_job_profile(subject: str, body: str) -> str:
    """
    Extract the job title from subject/body text.

    Returns:
        Job title or UNKNOWN_POSITION
    """
    return _first_match(ROLE_PATTERNS, f"{subject} {body}") or UNKNOWN_POSITION


def classify_status(subject: str, body: str) -> ApplicationStatus:
    """
    Classify application status from keywords.

    Priority: Rejected > Interview > Offer > Application Received.
    Anything without a signal is Applied.
    """
    text = f"{subject} {body}".lower()
    for status, patterns in STATUS_RULES:
        if any(p.search(text) for p in patterns):
            return status
    return DEFAULT_STATUS


def classify_heuristically(subject: str, body: str, sender: str) -> ClassificationFields:
    """Derive company, role and status purely from message text."""
    subject = subject or ""
    body = body or ""
    sender = sender or ""
    return ClassificationFields(
        company_name=extract_company(subject, body, sender),
        job_profile=extract_job_profile(subject, body),
        status=classify_status(subject, body),
    )
