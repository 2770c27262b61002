from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_ROOT = "https://api.clarifai.com"
DEFAULT_API_VERSION = "v1"

ENV_PREFIX = "CLARIFAI_"


class ClientConfig(BaseModel):
    """
    Immutable connection settings shared by the client and its transport.

    Either `access_token` or the `client_id` / `client_secret` pair must be
    set before the first request; the pair is exchanged for a token lazily.
    """

    model_config = ConfigDict(frozen=True)

    api_root: str = Field(default=DEFAULT_API_ROOT, description="Service base URL")
    api_version: str = Field(default=DEFAULT_API_VERSION, description="API version path segment")
    client_id: Optional[str] = Field(default=None, description="OAuth client id")
    client_secret: Optional[str] = Field(
        default=None, description="OAuth client secret", repr=False
    )
    access_token: Optional[str] = Field(
        default=None, description="Pre-issued bearer token", repr=False
    )
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build a config from CLARIFAI_* environment variables.

        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            value = environ.get(ENV_PREFIX + name.upper())
            if value:
                values[name] = value
        return cls.model_validate(values)

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.api_root.rstrip('/')}/{self.api_version}/{endpoint}/"
