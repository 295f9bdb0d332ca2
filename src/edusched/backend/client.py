"""Thin HTTP client for the hosted backend (auth + object storage).

The service speaks a Supabase-compatible REST API; every call carries the
project `apikey` header plus a bearer token (the anon key, a user access token
or, for admin calls, the service key).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import BackendError

logger = logging.getLogger(__name__)

TOO_LARGE = "Arquivo remoto excede o tamanho máximo permitido"


@dataclass(frozen=True)
class BackendConfig:
    url: str
    anon_key: str
    service_key: str = ""
    storage_bucket: str = "assets"


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            val = body.get(key)
            if val:
                return str(val)
    return f"HTTP {resp.status_code}"


class BackendClient:
    def __init__(self, config: BackendConfig, *, session: Optional[requests.Session] = None, timeout: int = 30):
        if not config.url or not config.anon_key:
            raise RuntimeError("Missing backend environment variables")
        self._config = config
        self._base = config.url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def config(self) -> BackendConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._base

    @property
    def has_service_key(self) -> bool:
        return bool(self._config.service_key)

    def _headers(self, *, access_token: Optional[str], admin: bool, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        if admin:
            if not self._config.service_key:
                raise BackendError("Chave de serviço do backend não configurada")
            key = self._config.service_key
            token = self._config.service_key
        else:
            key = self._config.anon_key
            token = access_token or self._config.anon_key
        headers = {"apikey": key, "Authorization": f"Bearer {token}"}
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
        admin: bool = False,
    ) -> Any:
        url = f"{self._base}{path}"
        h = self._headers(access_token=access_token, admin=admin, extra=headers)
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(
                method, url, json=json, params=params, data=data, headers=h, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise BackendError(f"Falha de comunicação com o backend: {e}") from e

        if resp.status_code >= 400:
            msg = _error_message(resp)
            logger.warning("backend %s %s -> %s: %s", method, path, resp.status_code, msg)
            raise BackendError(msg, status=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def fetch(self, url: str, *, max_bytes: Optional[int] = None, chunk_size: int = 64 * 1024) -> bytes:
        """GET an arbitrary (public) URL with the shared session.

        The body is streamed; reading stops as soon as it passes `max_bytes`.
        """
        try:
            resp = self._session.get(url, timeout=self._timeout, stream=True)
        except requests.RequestException as e:
            raise BackendError(f"Erro ao baixar arquivo: {e}") from e
        try:
            if resp.status_code >= 400:
                raise BackendError(f"Erro ao baixar arquivo (HTTP {resp.status_code})", status=resp.status_code)

            declared = resp.headers.get("Content-Length")
            if max_bytes is not None and declared and declared.isdigit() and int(declared) > max_bytes:
                raise BackendError(TOO_LARGE)

            buf = bytearray()
            try:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    buf.extend(chunk)
                    if max_bytes is not None and len(buf) > max_bytes:
                        raise BackendError(TOO_LARGE)
            except requests.RequestException as e:
                raise BackendError(f"Erro ao baixar arquivo: {e}") from e
            return bytes(buf)
        finally:
            resp.close()
