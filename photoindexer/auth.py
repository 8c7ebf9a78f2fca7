import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from photoindexer.config import DEFAULT_CREDENTIALS_PATH, DEFAULT_TOKEN_PATH, SCOPES
from photoindexer.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthManager:
    """
    Manages Google Photos API authentication,
    reading/writing the token file, refreshing creds, etc.
    """

    def __init__(self, token_file: Path = DEFAULT_TOKEN_PATH,
                 credentials_json: Path = DEFAULT_CREDENTIALS_PATH):
        self.credentials_json = Path(credentials_json)
        self.token_file = Path(token_file)
        self.creds = None

    def authenticate(self):
        """
        Loads credentials from the token file if valid; otherwise performs the OAuth flow.
        """
        if self.token_file.exists():
            try:
                self.creds = Credentials.from_authorized_user_file(str(self.token_file), SCOPES)
            except ValueError:
                logger.warning("Token file %s corrupt. Re-authenticating.", self.token_file)
                self.token_file.unlink()
                self.creds = None

        if not self.creds or not self.creds.valid:
            if self.creds and self.creds.expired and self.creds.refresh_token:
                try:
                    self.creds.refresh(Request())
                except GoogleAuthError as e:
                    logger.warning("Token refresh failed (%s). Re-authenticating.", e)
                    self.creds = None
            if not self.creds or not self.creds.valid:
                self.creds = self._run_flow()
            try:
                self.token_file.write_text(self.creds.to_json())
            except OSError as e:
                raise AuthenticationError(f"Cannot write token file {self.token_file}: {e}") from e

        logger.info("Established Photos API credentials.")
        return self.creds

    def _run_flow(self):
        if not self.credentials_json.exists():
            raise AuthenticationError(
                f"OAuth client secrets not found at {self.credentials_json}; pass --credentials"
            )
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.credentials_json),
                SCOPES
            )
            return flow.run_local_server(port=0)
        except (GoogleAuthError, OAuth2Error, ValueError) as e:
            raise AuthenticationError(f"Authorization failed: {e}") from e
