from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from contextlib import ExitStack
from typing import Any, Dict, Optional

import pydantic
import requests

from clarifai_api.config import ClientConfig
from clarifai_api.errors import (
    AuthenticationError,
    BadRequestError,
    ServerError,
    ThrottledError,
    TransportError,
)
from clarifai_api.schemas import HasFiles, TokenResponse

log = logging.getLogger(__name__)

STATUS_ERRORS = {
    400: BadRequestError,
    401: AuthenticationError,
    429: ThrottledError,
    500: ServerError,
}


class Transport(ABC):
    """Sends one request to a named endpoint and returns the raw body."""

    @abstractmethod
    def request(
        self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None
    ) -> bytes:
        ...

    @abstractmethod
    def upload(self, endpoint: str, req: HasFiles) -> bytes:
        ...


class HTTPTransport(Transport):
    """
    `requests`-based transport with OAuth2 client-credentials auth.

    The bearer token is fetched on first use. When client credentials are
    configured, a 401 drops it and the following call authenticates again;
    a pre-issued token without credentials is kept as is.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self._token = config.access_token
        self._token_lock = threading.Lock()

    def request(
        self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None
    ) -> bytes:
        url = self.config.endpoint_url(endpoint)
        headers = self._auth_headers()
        log.debug("[HTTP] %s %s", method, url)

        try:
            response = self.session.request(
                method, url, headers=headers, json=payload, timeout=self.config.timeout
            )
        except requests.RequestException as e:
            log.error("[HTTP] %s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

        return self._check(response)

    def upload(self, endpoint: str, req: HasFiles) -> bytes:
        url = self.config.endpoint_url(endpoint)
        headers = self._auth_headers()
        paths = req.get_files()
        data = {}
        if req.get_model():
            data["model"] = req.get_model()
        log.debug("[HTTP] POST %s (%d files)", url, len(paths))

        with ExitStack() as stack:
            try:
                files = [
                    ("encoded_data", (os.path.basename(path), stack.enter_context(open(path, "rb"))))
                    for path in paths
                ]
            except OSError as e:
                raise TransportError(f"Cannot read upload file: {e}") from e

            try:
                response = self.session.post(
                    url,
                    headers=headers,
                    data=data,
                    files=files,
                    timeout=self.config.timeout,
                )
            except requests.RequestException as e:
                log.error("[HTTP] POST %s failed: %s", url, e)
                raise TransportError(f"POST {url} failed: {e}") from e

        return self._check(response)

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token()}"}

    def _access_token(self) -> str:
        with self._token_lock:
            if not self._token:
                self._token = self._request_token()
            return self._token

    def _request_token(self) -> str:
        cfg = self.config
        if not cfg.client_id or not cfg.client_secret:
            raise AuthenticationError("No access token and no client credentials configured")

        url = cfg.endpoint_url("token")
        log.info("[AUTH] requesting access token from %s", url)
        try:
            response = self.session.post(
                url,
                data={
                    "client_id": cfg.client_id,
                    "client_secret": cfg.client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=cfg.timeout,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Token request failed: {e}") from e

        if response.status_code not in (200, 201):
            raise AuthenticationError(
                f"Token request returned HTTP {response.status_code}",
                status_code=response.status_code,
                status_msg=_status_msg(response),
            )
        try:
            token = TokenResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise AuthenticationError(f"Malformed token response: {e}") from e

        log.info("[AUTH] token issued, expires in %ds", token.expires_in)
        return token.access_token

    def _check(self, response: requests.Response) -> bytes:
        status = response.status_code
        if status in (200, 201):
            return response.content

        if status == 401 and self.config.client_id and self.config.client_secret:
            with self._token_lock:
                self._token = None

        error_cls = STATUS_ERRORS.get(status, TransportError)
        status_msg = _status_msg(response)
        log.error("[HTTP] %s -> %d %s", response.url, status, status_msg or "")
        raise error_cls(
            f"HTTP {status} from {response.url}",
            status_code=status,
            status_msg=status_msg,
        )


def _status_msg(response: requests.Response) -> Optional[str]:
    """Service message from an error body, when it is JSON."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("status_msg")
    return None
