from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..core.exceptions import BackendError
from .client import BackendClient
from .token_storage import TokenStorage

logger = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "edusched-auth-token:"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AuthUser":
        return cls(
            id=str(data.get("id") or ""),
            email=str(data.get("email") or ""),
            user_metadata=dict(data.get("user_metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "user_metadata": dict(self.user_metadata)}


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: int
    user: AuthUser

    def is_expired(self, now: float, *, margin: int = 10) -> bool:
        return now + margin >= self.expires_at

    @classmethod
    def from_api(cls, data: Dict[str, Any], *, now: float) -> "AuthSession":
        expires_at = data.get("expires_at")
        if not expires_at:
            expires_at = int(now) + int(data.get("expires_in") or 3600)
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data.get("refresh_token") or ""),
            expires_at=int(expires_at),
            user=AuthUser.from_api(data.get("user") or {}),
        )

    def to_json(self) -> str:
        return json.dumps(
            {
                "access_token": self.access_token,
                "refresh_token": self.refresh_token,
                "expires_at": self.expires_at,
                "user": self.user.to_dict(),
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "AuthSession":
        data = json.loads(raw)
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            expires_at=int(data["expires_at"]),
            user=AuthUser.from_api(data.get("user") or {}),
        )


class AuthClient:
    """Hosted auth API: sign-up, password sign-in, session refresh and admin user management."""

    def __init__(
        self,
        client: BackendClient,
        storage: TokenStorage,
        *,
        persist_session: bool = True,
        auto_refresh_token: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._storage = storage
        self._persist = persist_session
        self._auto_refresh = auto_refresh_token
        self._clock = clock

    @staticmethod
    def storage_key(user_id: str) -> str:
        return f"{STORAGE_KEY_PREFIX}{user_id}"

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        data = self._client.request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": dict(metadata or {})},
        )
        # Com confirmação de e-mail ligada o serviço devolve só o usuário; sem ela, uma sessão.
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            return AuthUser.from_api(data["user"])
        if not isinstance(data, dict) or not data.get("id"):
            raise BackendError("Resposta inesperada do serviço de autenticação")
        return AuthUser.from_api(data)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = AuthSession.from_api(data, now=self._clock())
        self._save(session)
        return session

    def refresh_session(self, refresh_token: str) -> AuthSession:
        data = self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        session = AuthSession.from_api(data, now=self._clock())
        self._save(session)
        return session

    def get_session(self, user_id: str) -> Optional[AuthSession]:
        key = self.storage_key(user_id)
        raw = self._storage.get_item(key)
        if not raw:
            return None
        try:
            session = AuthSession.from_json(raw)
        except (ValueError, KeyError) as e:
            logger.warning("Discarding unreadable stored session for %s: %s", user_id, e)
            self._storage.remove_item(key)
            return None

        if not session.is_expired(self._clock()):
            return session
        if not self._auto_refresh or not session.refresh_token:
            return None
        try:
            return self.refresh_session(session.refresh_token)
        except BackendError as e:
            logger.info("Session refresh failed for %s: %s", user_id, e)
            self._storage.remove_item(key)
            return None

    def sign_out(self, user_id: str) -> None:
        session = None
        raw = self._storage.get_item(self.storage_key(user_id))
        if raw:
            try:
                session = AuthSession.from_json(raw)
            except (ValueError, KeyError):
                session = None
        if session:
            try:
                self._client.request("POST", "/auth/v1/logout", access_token=session.access_token)
            except BackendError as e:
                logger.info("Remote logout failed for %s: %s", user_id, e)
        self._storage.remove_item(self.storage_key(user_id))

    # --- admin (service key) ---

    def admin_create_user(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        data = self._client.request(
            "POST",
            "/auth/v1/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": dict(metadata or {}),
            },
            admin=True,
        )
        return AuthUser.from_api(data or {})

    def admin_update_user(
        self,
        user_id: str,
        *,
        password: Optional[str] = None,
        email: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuthUser:
        body: Dict[str, Any] = {}
        if password is not None:
            body["password"] = password
        if email is not None:
            body["email"] = email
        if metadata is not None:
            body["user_metadata"] = dict(metadata)
        data = self._client.request("PUT", f"/auth/v1/admin/users/{user_id}", json=body, admin=True)
        return AuthUser.from_api(data or {"id": user_id})

    def admin_delete_user(self, user_id: str) -> None:
        self._client.request("DELETE", f"/auth/v1/admin/users/{user_id}", admin=True)

    def _save(self, session: AuthSession) -> None:
        if not self._persist or not session.user.id:
            return
        self._storage.set_item(self.storage_key(session.user.id), session.to_json())
