"""
Client for the Clarifai v1 image recognition API.

Contains:
- `client`    : `Client` facade with `info`, `tag`, `color`, `feedback`
- `schemas`   : pydantic request/response models and the `HasFiles` contract
- `transport` : `Transport` interface and the `requests`-based `HTTPTransport`
- `config`    : immutable `ClientConfig`, loadable from CLARIFAI_* variables
- `errors`    : `ValidationError`, `DecodeError`, `TransportError` and subclasses
"""

from clarifai_api.client import Client
from clarifai_api.config import ClientConfig
from clarifai_api.errors import (
    AuthenticationError,
    BadRequestError,
    ClarifaiError,
    DecodeError,
    ServerError,
    ThrottledError,
    TransportError,
    ValidationError,
)
from clarifai_api.schemas import (
    ColorRequest,
    ColorResponse,
    FeedbackForm,
    FeedbackResponse,
    HasFiles,
    InfoResponse,
    ServiceInfo,
    TagRequest,
    TagResponse,
)
from clarifai_api.transport import HTTPTransport, Transport

__all__ = [
    "AuthenticationError",
    "BadRequestError",
    "ClarifaiError",
    "Client",
    "ClientConfig",
    "ColorRequest",
    "ColorResponse",
    "DecodeError",
    "FeedbackForm",
    "FeedbackResponse",
    "HTTPTransport",
    "HasFiles",
    "InfoResponse",
    "ServerError",
    "ServiceInfo",
    "TagRequest",
    "TagResponse",
    "ThrottledError",
    "Transport",
    "TransportError",
    "ValidationError",
]
