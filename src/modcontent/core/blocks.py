"""Content block variants and the strict (write) / tolerant (read) block parsers"""

import math
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, field_validator, model_validator,
)
from pydantic import ValidationError as PydanticValidationError


LEGACY_BLOCK_TYPES = frozenset({"kpis", "kpi-strip", "timeline"})

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class MetricIcon(str, Enum):
    """Fixed icon set for metrics_flow items"""
    box_truck = "box-truck"
    cargo_van = "cargo-van"
    trailer = "trailer"
    package = "package"
    warehouse = "warehouse"


class _Block(BaseModel):
    """Shared config: camelCase wire keys, unknown keys dropped, frozen once parsed."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    # Wire keys of optional text fields; a non-string value there is treated as absent.
    optional_text: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _drop_non_string_optionals(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            k: v for k, v in data.items()
            if not (k in cls.optional_text and v is not None and not isinstance(v, str))
        }


class BulletsBlock(_Block):
    type: Literal["bullets"]
    title: Optional[str] = None
    description: Optional[str] = None
    items: Annotated[list[StrictStr], Field(min_length=1)]

    optional_text: ClassVar[frozenset[str]] = frozenset({"title", "description"})


class ProseBlock(_Block):
    type: Literal["prose"]
    title: Optional[str] = None
    description: Optional[str] = None
    content: NonEmptyStr

    optional_text: ClassVar[frozenset[str]] = frozenset({"title", "description"})


class ImageBlock(_Block):
    type: Literal["image"]
    alt: NonEmptyStr
    asset_id: Optional[str] = Field(default=None, alias="assetId")
    path: Optional[str] = None
    caption: Optional[str] = None
    layout: Optional[Literal["full", "wide"]] = None
    treatment: Optional[Literal["plain", "panel"]] = None

    optional_text: ClassVar[frozenset[str]] = frozenset({"assetId", "path", "caption", "layout", "treatment"})

    @model_validator(mode="after")
    def _require_source(self) -> "ImageBlock":
        if not self.asset_id and not self.path:
            raise ValueError("image block needs an assetId or a path")
        return self


class PdfBlock(_Block):
    """A PDF slot; every field may be null while the document is not yet configured."""
    type: Literal["pdf"]
    path: Optional[str] = None
    url: Optional[str] = None
    filename: Optional[str] = None
    caption: Optional[str] = None

    optional_text: ClassVar[frozenset[str]] = frozenset({"path", "url", "filename", "caption"})


class EmptyBlock(_Block):
    type: Literal["empty"]
    title: NonEmptyStr
    description: Optional[str] = None

    optional_text: ClassVar[frozenset[str]] = frozenset({"description"})


class FlowMetric(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    key: NonEmptyStr
    label: NonEmptyStr
    value: Union[int, float]
    icon: MetricIcon

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        """Accept numbers and numeric strings; booleans are not numbers here."""
        if isinstance(value, bool):
            raise ValueError("metric value must be a number")
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                return float(text)
            except ValueError:
                raise ValueError(f"metric value {value!r} is not numeric") from None
        return value

    @field_validator("value")
    @classmethod
    def _non_negative(cls, value: Union[int, float]) -> Union[int, float]:
        try:
            finite = math.isfinite(value)
        except OverflowError:
            finite = False
        if not finite or value < 0:
            raise ValueError("metric value must be a finite number >= 0")
        return value


class MetricsFlowBlock(_Block):
    type: Literal["metrics_flow"]
    title: NonEmptyStr
    total_label: NonEmptyStr = Field(alias="totalLabel")
    subtitle: Optional[str] = None
    metrics: Annotated[list[FlowMetric], Field(min_length=2, max_length=8)]

    optional_text: ClassVar[frozenset[str]] = frozenset({"subtitle"})


ContentBlock = Annotated[
    Union[BulletsBlock, ProseBlock, ImageBlock, PdfBlock, EmptyBlock, MetricsFlowBlock],
    Field(discriminator="type"),
]

BLOCK_TYPES = frozenset({"bullets", "prose", "image", "pdf", "empty", "metrics_flow"})

_adapter = TypeAdapter(ContentBlock)


def parse_block(raw: Any) -> ContentBlock | None:
    """Validate one raw element. None for non-objects, legacy/unknown tags, or failed variant rules."""
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("type")
    if not isinstance(block_type, str) or block_type not in BLOCK_TYPES:
        return None
    try:
        return _adapter.validate_python(raw)
    except PydanticValidationError:
        return None


def is_legacy_block(raw: Any) -> bool:
    """True for tags from an earlier schema version (kpis, timeline, ...)."""
    return isinstance(raw, dict) and raw.get("type") in LEGACY_BLOCK_TYPES


def parse_blocks(raw: Any) -> list[ContentBlock]:
    """Tolerant parse for the read path: keep every valid element, silently drop the rest.

    Always returns a list; a non-list input yields []. An empty list is a valid
    value (all content deliberately removed).
    """
    if not isinstance(raw, list):
        return []
    return [b for b in (parse_block(item) for item in raw) if b is not None]


def parse_stored_blocks(raw: Any) -> list[ContentBlock] | None:
    """Tolerant parse plus the all-survived check, for re-using a stored snapshot.

    Returns None when the stored value is not a list or any element was dropped.
    """
    if not isinstance(raw, list):
        return None
    parsed = parse_blocks(raw)
    return parsed if len(parsed) == len(raw) else None


def validate_blocks_for_write(raw: Any) -> list[ContentBlock] | None:
    """Strict validation for the write path: every element must parse, else None.

    Signed URLs are stripped so they never reach storage.
    """
    parsed = parse_stored_blocks(raw)
    if parsed is None:
        return None
    return [sanitize_for_storage(b) for b in parsed]


def sanitize_for_storage(block: ContentBlock) -> ContentBlock:
    """Null the signed url on pdf blocks; image urls are never modelled."""
    if isinstance(block, PdfBlock) and block.url is not None:
        return block.model_copy(update={"url": None})
    return block


def dump_block(block: ContentBlock) -> dict[str, Any]:
    return block.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_blocks(blocks: list[ContentBlock]) -> list[dict[str, Any]]:
    """JSON-ready list written to both the section row and its audit event."""
    return [dump_block(b) for b in blocks]
