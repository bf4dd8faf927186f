"""
Classify Application Prompt Template

This prompt asks the model to pull company, role and status out of a
job-application email and answer with a single JSON object.
"""

from apptrack.models import ApplicationStatus

STATUS_CHOICES = ", ".join(s.value for s in ApplicationStatus)


def build_classify_application_prompt(subject: str, body: str, sender: str) -> str:
    """
    Build the prompt for application email classification.

    Args:
        subject: Email subject line
        body: Email body, already truncated by the caller
        sender: Raw From header

    Returns:
        str: Formatted prompt string
    """
    return f"""Analyze this job application email and extract information in JSON format.

Email Subject: "{subject}"
Email From: "{sender}"
Email Body: "{body}"

Return a JSON object with exactly these fields:
{{
    "companyName": "name of the company (extract from email domain if unclear)",
    "jobProfile": "the job position/role",
    "applicationStatus": "one of: {STATUS_CHOICES}"
}}

Base your analysis on:
1. Common recruiting email patterns
2. Context clues from subject and body
3. Email sender domain
4. Status keywords and phrases
"""
