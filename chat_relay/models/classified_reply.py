"""Models describing a classified assistant reply."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import ResponseType


class ReplyMetadata(BaseModel):
    """Auxiliary annotations derived from a reply.

    The boolean flags mirror the reply's content type and are filled in by
    :meth:`for_type`; they are never set on their own.  ``json_keys`` keeps
    the top-level keys of a JSON object in document order (keys are unique
    after decoding, so the list behaves as a set).  Fields that do not apply
    to the detected type stay ``None`` and are dropped on serialisation.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    language: str | None = None
    is_code: bool = False
    is_json: bool = False
    is_markdown: bool = False
    is_table: bool = False
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    json_keys: list[str] | None = None
    json_depth: int | None = Field(default=None, ge=1)

    @classmethod
    def for_type(cls, content_type: ResponseType, **fields: Any) -> "ReplyMetadata":
        """Build metadata whose flags agree with ``content_type``."""
        return cls(
            is_code=content_type is ResponseType.CODE,
            is_json=content_type is ResponseType.JSON,
            is_markdown=content_type is ResponseType.MARKDOWN,
            is_table=content_type is ResponseType.TABLE,
            **fields,
        )


class ClassifiedReply(BaseModel):
    """A model reply together with its detected content type and metadata.

    Instances are created once per provider response and never mutated.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    content: str
    content_type: ResponseType
    metadata: ReplyMetadata

    @model_validator(mode="after")
    def validate_flags(self) -> "ClassifiedReply":
        expected = ReplyMetadata.for_type(self.content_type)
        flags = ("is_code", "is_json", "is_markdown", "is_table")
        if any(getattr(self.metadata, flag) != getattr(expected, flag) for flag in flags):
            raise ValueError(
                f"Metadata flags do not match content type '{self.content_type.value}'"
            )
        if self.content_type is not ResponseType.JSON and (
            self.metadata.json_keys is not None or self.metadata.json_depth is not None
        ):
            raise ValueError("JSON statistics are only valid for JSON replies")
        return self
