from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
    model_validator,
)


class HasFiles(ABC):
    """
    Capability shared by requests that can carry uploaded image files.

    The transport only needs these two answers to pick between a
    multipart upload and a plain JSON body.
    """

    @abstractmethod
    def get_files(self) -> List[str]:
        """Local file paths to upload; empty when the request targets URLs."""

    @abstractmethod
    def get_model(self) -> str:
        """Selected model name, or "" for the service default."""


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Keys the service expects even when empty.
    always_sent: ClassVar[Tuple[str, ...]] = ()

    def to_payload(self) -> Dict[str, Any]:
        """JSON body with empty optional fields left out."""
        payload = self.model_dump(by_alias=True, exclude_none=True)
        return {k: v for k, v in payload.items() if v or k in self.always_sent}


class ColorRequest(_Request, HasFiles):
    urls: List[str] = Field(default_factory=list, alias="url")
    files: List[str] = Field(default_factory=list)

    always_sent: ClassVar[Tuple[str, ...]] = ("url",)

    def get_files(self) -> List[str]:
        return list(self.files)

    def get_model(self) -> str:
        return ""


class TagRequest(_Request, HasFiles):
    urls: List[str] = Field(default_factory=list, alias="url")
    files: List[str] = Field(default_factory=list)
    local_ids: List[str] = Field(default_factory=list)
    model: Optional[str] = None

    always_sent: ClassVar[Tuple[str, ...]] = ("url",)

    def get_files(self) -> List[str]:
        return list(self.files)

    def get_model(self) -> str:
        return self.model or ""


class FeedbackForm(_Request):
    """
    Feedback on earlier results, addressed either by docid or by URL.
    """

    docids: List[str] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list, alias="url")
    add_tags: List[str] = Field(default_factory=list)
    remove_tags: List[str] = Field(default_factory=list)
    dissimilar_docids: List[str] = Field(default_factory=list)
    similar_docids: List[str] = Field(default_factory=list)
    search_click: List[str] = Field(default_factory=list)


class _Response(BaseModel):
    """
    Decoded service payload.

    Scalars are strict: a numeric string where a number belongs (or the
    reverse) is rejected. JSON null falls back to the field default.
    """

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class StatusResponse(_Response):
    status_code: StrictStr = ""
    status_msg: StrictStr = ""


class ServiceInfo(_Response):
    max_image_size: StrictInt = 0
    default_language: StrictStr = ""
    max_video_size: StrictInt = 0
    max_image_bytes: StrictInt = 0
    default_model: StrictStr = ""
    max_video_bytes: StrictInt = 0
    max_video_duration: StrictInt = 0
    max_video_batch_size: StrictInt = 0
    min_video_size: StrictInt = 0
    min_image_size: StrictInt = 0
    max_batch_size: StrictInt = 0
    api_version: StrictFloat = 0.0


class InfoResponse(StatusResponse):
    results: ServiceInfo = Field(default_factory=ServiceInfo)


class W3CColor(_Response):
    hex: StrictStr = ""
    name: StrictStr = ""


class Color(_Response):
    hex: StrictStr = ""
    density: StrictFloat = 0.0  # fraction of the image area
    w3c: W3CColor = Field(default_factory=W3CColor)


class ColorResult(_Response):
    # docid can exceed 64 bits; docid_str mirrors it for consumers that
    # only handle fixed-width integers.
    docid: Optional[StrictInt] = None
    url: StrictStr = ""
    colors: List[Color] = Field(default_factory=list)
    docid_str: StrictStr = ""


class ColorResponse(StatusResponse):
    results: List[ColorResult] = Field(default_factory=list)


class TagPrediction(_Response):
    classes: List[StrictStr] = Field(default_factory=list)
    catids: List[StrictStr] = Field(default_factory=list)
    probs: List[StrictFloat] = Field(default_factory=list)

    @model_validator(mode="after")
    def _parallel_arrays(self) -> "TagPrediction":
        if len(self.classes) != len(self.probs):
            raise ValueError(
                f"classes/probs length mismatch: {len(self.classes)} != {len(self.probs)}"
            )
        return self


class TagOutput(_Response):
    tag: TagPrediction = Field(default_factory=TagPrediction)


class TagResult(_Response):
    docid: Optional[StrictInt] = None
    url: StrictStr = ""
    status_code: StrictStr = ""
    status_msg: StrictStr = ""
    local_id: StrictStr = ""
    result: TagOutput = Field(default_factory=TagOutput)
    docid_str: StrictStr = ""

    @property
    def tags(self) -> List[Tuple[str, float]]:
        """(label, score) pairs in the order the service ranked them."""
        prediction = self.result.tag
        return list(zip(prediction.classes, prediction.probs))


class TagMetaInfo(_Response):
    timestamp: Optional[StrictFloat] = None
    model: StrictStr = ""
    config: StrictStr = ""


class TagMeta(_Response):
    tag: TagMetaInfo = Field(default_factory=TagMetaInfo)


class TagResponse(StatusResponse):
    meta: TagMeta = Field(default_factory=TagMeta)
    results: List[TagResult] = Field(default_factory=list)


class FeedbackResponse(StatusResponse):
    pass


class TokenResponse(BaseModel):
    access_token: str
    expires_in: int = 0
    scope: str = ""
    token_type: str = ""
