"""
Gmail Client - Gmail API access for an already-authorized mailbox

The caller supplies credentials; this module never runs an interactive
OAuth flow. A bearer access token from the web session or a stored
authorized-user token file are both accepted.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional

from google.auth.exceptions import GoogleAuthError, RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)

# Gmail API scopes - readonly access to messages
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


class MailProviderError(Exception):
    """Raised when a Gmail list or get call fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class AuthenticationError(MailProviderError):
    """Raised when the credential is missing, expired or rejected."""


class GmailClient:
    """
    Gmail API client bound to one set of credentials.

    Service objects are built per thread because the underlying httplib2
    transport is not thread-safe.
    """

    def __init__(self, credentials: Credentials):
        if credentials is None:
            raise AuthenticationError("No Gmail credentials supplied", status=401)
        self._creds = credentials
        self._local = threading.local()

    @classmethod
    def from_access_token(cls, access_token: str) -> "GmailClient":
        """Build a client from an opaque OAuth2 bearer token."""
        if not access_token:
            raise AuthenticationError("Missing access token", status=401)
        return cls(Credentials(token=access_token))

    @classmethod
    def from_authorized_user_file(cls, token_file: Path) -> "GmailClient":
        """
        Build a client from a stored authorized-user token file.

        Expired credentials are refreshed in place and written back.

        Raises:
            AuthenticationError: If the file is missing or cannot be refreshed
        """
        token_file = Path(token_file)
        if not token_file.exists():
            raise AuthenticationError(f"Token file not found: {token_file}", status=401)

        creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
        if not creds.valid:
            if not (creds.expired and creds.refresh_token):
                raise AuthenticationError("Stored Gmail credentials are invalid", status=401)
            try:
                creds.refresh(Request())
            except RefreshError as e:
                logger.error(f"Failed to refresh Gmail credentials: {e}")
                raise AuthenticationError(f"Credential refresh failed: {e}", status=401) from e
            with open(token_file, "w") as f:
                f.write(creds.to_json())

        return cls(creds)

    def get_service(self):
        """Get the Gmail API service for the calling thread."""
        service = getattr(self._local, "service", None)
        if service is None:
            service = build("gmail", "v1", credentials=self._creds, cache_discovery=False)
            self._local.service = service
        return service

    def search_messages(self, query: str, max_results: int = 100) -> List[str]:
        """
        Search for messages matching a query.

        Args:
            query: Gmail search query string
            max_results: Maximum number of ids to return

        Returns:
            Message ids in the order Gmail returned them
        """
        request = (
            self.get_service()
            .users()
            .messages()
            .list(userId="me", q=query, maxResults=max_results)
        )
        results = self._execute(request, f"list '{query}'")
        return [m["id"] for m in results.get("messages", []) if m.get("id")]

    def get_message(self, msg_id: str, format: str = "full") -> dict:
        """
        Get a single email message.

        Args:
            msg_id: Gmail message ID
            format: Response format ('full', 'minimal', 'raw')

        Returns:
            Message dictionary from Gmail API
        """
        request = (
            self.get_service().users().messages().get(userId="me", id=msg_id, format=format)
        )
        return self._execute(request, f"get {msg_id}")

    @staticmethod
    def _execute(request, description: str) -> dict:
        try:
            return request.execute()
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            if status == 401:
                raise AuthenticationError(f"Gmail rejected credentials ({description})", status=401) from e
            logger.error(f"Gmail API error on {description}: {e}")
            raise MailProviderError(f"Gmail API error on {description}: {e}", status=status) from e
        except RefreshError as e:
            raise AuthenticationError(f"Credential refresh failed: {e}", status=401) from e
        except (GoogleAuthError, OSError) as e:
            logger.error(f"Gmail transport error on {description}: {e}")
            raise MailProviderError(f"Gmail transport error on {description}: {e}") from e
