"""Identity verification and credential binding for Google-signed-in users."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import id_token
from google.oauth2.credentials import Credentials

from strain_api.core.exceptions import AuthError, ConflictError
from strain_api.schemas.auth import Principal
from strain_api.services.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
# Authorization codes obtained by the browser popup flow are redeemed with this redirect URI.
POSTMESSAGE_REDIRECT_URI = "postmessage"


def verify_google_id_token(token: str, audience: str) -> Dict[str, Any]:
    return id_token.verify_oauth2_token(token, Request(), audience=audience)


class OAuthClient:
    """Outbound Google client context; unbound until a refresh token is attached."""

    def __init__(self, client_id: str, client_secret: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token: str | None = None

    @property
    def is_bound(self) -> bool:
        return bool(self.refresh_token)

    def set_credentials(self, refresh_token: str) -> None:
        self.refresh_token = refresh_token

    def credentials(self) -> Credentials:
        if not self.is_bound:
            raise AuthError("Error: no refresh_token")
        return Credentials(
            token=None,
            refresh_token=self.refresh_token,
            token_uri=GOOGLE_TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )


class CredentialBinder:
    """
    Verifies who a request acts as, and separately attaches that principal's
    stored refresh token. A verified principal with no stored credential is a
    distinct failure from an invalid identity token.
    """

    def __init__(
        self,
        store: WorkflowStore,
        client_id: str,
        client_secret: str,
        verifier: Callable[[str, str], Dict[str, Any]] = verify_google_id_token,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.client_id = client_id
        self.client_secret = client_secret
        self._verifier = verifier
        self._transport = transport

    def new_client(self) -> OAuthClient:
        return OAuthClient(self.client_id, self.client_secret)

    async def resolve_principal(self, identity_token: str | None) -> Principal:
        if not identity_token:
            raise AuthError("Error: no id_token")
        try:
            payload = await asyncio.to_thread(self._verifier, identity_token, self.client_id)
        except (ValueError, GoogleAuthError) as exc:
            raise AuthError(str(exc) or "Invalid id_token") from exc

        email = str((payload or {}).get("email") or "").strip()
        if not email:
            raise AuthError("Token payload does not contain an email")
        return Principal(email=email)

    def bind_credential(self, client: OAuthClient, email: str) -> None:
        user = self.store.find_user(email)
        if user is not None and user.credential:
            client.set_credentials(user.credential)

    def bound_client(self, email: str) -> OAuthClient:
        """Return a client carrying the user's credential, or fail with AuthError."""
        client = self.new_client()
        self.bind_credential(client, email)
        if not client.is_bound:
            raise AuthError("Error: no refresh_token")
        return client

    async def exchange_code(self, auth_code: str) -> Dict[str, Any]:
        payload = {
            "grant_type": "authorization_code",
            "code": auth_code,
            "redirect_uri": POSTMESSAGE_REDIRECT_URI,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data=payload,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as exc:
            raise AuthError(f"Token exchange failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("Google token exchange failed: %s", response.text)
            raise AuthError(response.text or "Token exchange failed")
        tokens = response.json()
        if not tokens.get("id_token"):
            raise AuthError("Google token response missing id_token")
        return tokens

    async def sign_in(self, auth_code: str, storage: Any, project_id: str, bucket_name: str) -> str:
        """
        Redeem an authorization code, record the user and their refresh token,
        and make sure the project bucket exists. Returns the id token.
        """
        tokens = await self.exchange_code(auth_code)
        principal = await self.resolve_principal(tokens["id_token"])

        try:
            self.store.create_user(principal.email)
        except ConflictError:
            logger.debug("Returning user %s", principal.email)

        refresh_token = tokens.get("refresh_token")
        if refresh_token:
            self.store.set_credential(principal.email, refresh_token)

        client = self.bound_client(principal.email)
        await storage.ensure_bucket(project_id, bucket_name, client.credentials())
        logger.info("Signed in %s", principal.email)
        return tokens["id_token"]
