from __future__ import annotations

import json
import logging
from typing import Optional, Sequence, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict

from clarifai_api.config import ClientConfig
from clarifai_api.errors import DecodeError, ValidationError
from clarifai_api.schemas import (
    ColorRequest,
    ColorResponse,
    FeedbackForm,
    FeedbackResponse,
    HasFiles,
    InfoResponse,
    TagRequest,
    TagResponse,
)
from clarifai_api.transport import HTTPTransport, Transport

log = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class Client(BaseModel):
    """
    Facade over the info, tag, color and feedback endpoints.

    A client is an immutable value: the connection settings and the
    transport that carries requests. Each call validates, dispatches once,
    and decodes; nothing is retried.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config: ClientConfig
    transport: Transport

    @classmethod
    def from_config(cls, config: Optional[ClientConfig] = None) -> "Client":
        config = config or ClientConfig.from_env()
        return cls(config=config, transport=HTTPTransport(config))

    def info(self) -> InfoResponse:
        """Service limits and defaults."""
        raw = self.transport.request("GET", "info")
        return _decode(InfoResponse, raw, "info")

    def tag(self, req: TagRequest) -> TagResponse:
        """Predict tags for a batch of images given by URL or by file."""
        _require_one_of(req.urls, req.files, "url", "file", "tag")
        log.info("[TAG] %d urls, %d files, model=%r", len(req.urls), len(req.files), req.model)
        raw = self._dispatch(req, "tag")
        res = _decode(TagResponse, raw, "tag")
        log.info("[TAG] %d results (%s)", len(res.results), res.status_code)
        return res

    def color(self, req: ColorRequest) -> ColorResponse:
        """Dominant colors for a batch of images given by URL or by file."""
        _require_one_of(req.urls, req.files, "url", "file", "color")
        log.info("[COLOR] %d urls, %d files", len(req.urls), len(req.files))
        raw = self._dispatch(req, "color")
        res = _decode(ColorResponse, raw, "color")
        log.info("[COLOR] %d results (%s)", len(res.results), res.status_code)
        return res

    def feedback(self, form: FeedbackForm) -> FeedbackResponse:
        """
        Send corrections for earlier results.

        The form must address results either by docid or by URL, not both.
        """
        _require_one_of(form.docids, form.urls, "docid", "url", "feedback")
        log.info("[FEEDBACK] %d docids, %d urls", len(form.docids), len(form.urls))
        raw = self.transport.request("POST", "feedback", form.to_payload())
        return _decode(FeedbackResponse, raw, "feedback")

    def _dispatch(self, req: HasFiles, endpoint: str) -> bytes:
        if req.get_files():
            return self.transport.upload(endpoint, req)
        return self.transport.request("POST", endpoint, req.to_payload())


def _require_one_of(
    first: Sequence[str], second: Sequence[str], first_name: str, second_name: str, op: str
) -> None:
    if not first and not second:
        log.warning("[%s] rejected: no %s or %s given", op.upper(), first_name, second_name)
        raise ValidationError(f"{op} requires at least one {first_name} or {second_name}")
    if first and second:
        log.warning("[%s] rejected: both %ss and %ss given", op.upper(), first_name, second_name)
        raise ValidationError(
            f"{op} accepts either {first_name}s or {second_name}s, not both"
        )


def _decode(model: Type[R], raw: bytes, op: str) -> R:
    # Stdlib json keeps integers exact, so docids wider than 64 bits survive.
    try:
        return model.model_validate(json.loads(raw))
    except (json.JSONDecodeError, UnicodeDecodeError, pydantic.ValidationError) as e:
        log.error("[%s] undecodable response: %s", op.upper(), e)
        raise DecodeError(f"Cannot decode {op} response: {e}") from e
