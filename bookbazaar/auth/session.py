"""
Session Manager - who is logged in, and the credentials to act for them.

State machine:
    UNAUTHENTICATED --login/register--> RESOLVING --/auth/me ok--> AUTHENTICATED
    RESOLVING --/auth/me rejected or unreachable--> UNAUTHENTICATED (forced logout)
    AUTHENTICATED --logout--> UNAUTHENTICATED

At startup a persisted token puts the manager straight into RESOLVING.
Identity is never held without a token.
"""
from typing import Any, Optional

from pydantic import ValidationError

from bookbazaar.api_client import ApiClient
from bookbazaar.auth.models import Identity, SessionState
from bookbazaar.config import API_KEY_STORAGE_KEY, TOKEN_STORAGE_KEY
from bookbazaar.errors import (
    ERROR_API_KEY_FAILED,
    ERROR_LOGIN_FAILED,
    ERROR_REGISTRATION_FAILED,
    ERROR_TRY_AGAIN,
    ApiError,
    ApiKeyError,
    AuthenticationError,
    NetworkError,
)
from bookbazaar.events import EventBus, IdentityChanged, Listener
from bookbazaar.logging import get_logger, redact_token
from bookbazaar.notifications import NotificationService
from bookbazaar.storage import KeyValueStorage

logger = get_logger(__name__)


def _string_field(data: Any, name: str) -> Optional[str]:
    """Return ``data[name]`` if it is a non-empty string."""
    if isinstance(data, dict):
        value = data.get(name)
        if isinstance(value, str) and value:
            return value
    return None


class SessionManager:
    """
    Owns identity, session token and API key.

    Construct once at application start and pass it to whatever needs it;
    there is no teardown. Dependents learn about identity changes by
    subscribing via ``subscribe()``.
    """

    def __init__(
        self,
        api: ApiClient,
        storage: KeyValueStorage,
        notifications: NotificationService,
        events: Optional[EventBus] = None,
    ):
        self._api = api
        self._storage = storage
        self._notifications = notifications
        self._events = events or EventBus()

        self._identity: Optional[Identity] = None
        self._token: Optional[str] = None
        self._api_key: Optional[str] = None
        # True until the startup token (if any) has been resolved
        self.loading = True

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def state(self) -> SessionState:
        if self._token is None:
            return SessionState.UNAUTHENTICATED
        if self._identity is None:
            return SessionState.RESOLVING
        return SessionState.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self._identity is not None and self._identity.is_admin

    def subscribe(self, listener: Listener):
        """Register for identity-changed events. Returns an unsubscribe callable."""
        return self._events.subscribe(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Rehydrate credentials from storage and resolve the identity if a token exists."""
        self._token = self._storage.get(TOKEN_STORAGE_KEY)
        self._api_key = self._storage.get(API_KEY_STORAGE_KEY)

        if self._token:
            logger.info(f"Resolving persisted session {redact_token(self._token)}")
            await self.refresh_identity()
        else:
            self._token = None
            self.loading = False

    async def login(self, email: str, password: str) -> None:
        """
        Log in with email and password.

        Raises:
            AuthenticationError: Credentials rejected or service unreachable.
                A destructive notification has already been shown.
        """
        await self._authenticate(
            "/auth/login",
            {"email": email, "password": password},
            failure_title=ERROR_LOGIN_FAILED,
            success=("Login successful", "Welcome back!"),
        )

    async def register(self, username: str, email: str, password: str) -> None:
        """
        Create an account and log in with it.

        Raises:
            AuthenticationError: Registration rejected or service unreachable.
        """
        await self._authenticate(
            "/auth/register",
            {"username": username, "email": email, "password": password},
            failure_title=ERROR_REGISTRATION_FAILED,
            success=("Registration successful", "Welcome to BookBazaar!"),
        )

    async def logout(self) -> None:
        """Forget identity and credentials locally. Never contacts the server."""
        await self._clear_session()
        self._notifications.notify("Logged out", "See you soon!")

    async def generate_api_key(self) -> str:
        """
        Ask the server for a new API key, replacing the current one.

        Callers must hold a session token.

        Raises:
            ApiKeyError: Generation failed; the previous key is kept.
        """
        try:
            data = await self._api.post("/auth/api-key", token=self._token)
        except ApiError as e:
            self._notifications.notify_error(ERROR_API_KEY_FAILED, ERROR_TRY_AGAIN)
            raise ApiKeyError(ERROR_API_KEY_FAILED) from e

        api_key = _string_field(data, "apiKey")
        if api_key is None:
            logger.warning("API key response without apiKey field")
            self._notifications.notify_error(ERROR_API_KEY_FAILED, ERROR_TRY_AGAIN)
            raise ApiKeyError(ERROR_API_KEY_FAILED)

        self._api_key = api_key
        self._storage.set(API_KEY_STORAGE_KEY, api_key)
        self._notifications.notify("API Key generated", "Your new API key is ready to use")
        return api_key

    async def refresh_identity(self) -> Optional[Identity]:
        """
        Fetch the identity for the current token.

        Any failure is an invalid session and forces a silent logout.
        """
        token = self._token
        if not token:
            self.loading = False
            return None

        try:
            data = await self._api.get("/auth/me", token=token)
            identity = Identity.model_validate(data)
        except (ApiError, ValidationError) as e:
            logger.warning(f"Identity refresh failed, forcing logout: {e}")
            self.loading = False
            # A newer login may have replaced the token while we waited
            if self._token == token:
                await self._clear_session()
            return None

        self.loading = False
        if self._token != token:
            logger.info("Discarding identity for a token that is no longer current")
            return None

        self._identity = identity
        logger.info(f"Authenticated as user {identity.id}")
        await self._publish()
        return identity

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _authenticate(
        self,
        path: str,
        payload: dict[str, str],
        failure_title: str,
        success: tuple[str, str],
    ) -> None:
        try:
            data = await self._api.post(path, json=payload)
        except NetworkError as e:
            self._notifications.notify_error(failure_title, ERROR_TRY_AGAIN)
            raise AuthenticationError(ERROR_TRY_AGAIN) from e
        except ApiError as e:
            reason = e.message or failure_title
            self._notifications.notify_error(failure_title, reason)
            raise AuthenticationError(reason) from e

        token = _string_field(data, "token")
        if token is None:
            logger.warning(f"{path} succeeded without a token")
            self._notifications.notify_error(failure_title, ERROR_TRY_AGAIN)
            raise AuthenticationError(failure_title)

        previous_token = self._token
        self._token = token
        self._identity = None
        self._storage.set(TOKEN_STORAGE_KEY, token)
        if previous_token is not None:
            # Replacing a live session: subscribers drop the previous user's state
            await self._publish()
        self._notifications.notify(*success)
        await self.refresh_identity()

    async def _clear_session(self) -> None:
        self._identity = None
        self._token = None
        self._api_key = None
        self._storage.remove(TOKEN_STORAGE_KEY)
        self._storage.remove(API_KEY_STORAGE_KEY)
        await self._publish()

    async def _publish(self) -> None:
        await self._events.publish(IdentityChanged(identity=self._identity, token=self._token))
