from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from fragments.core.errors import ValidationError

SUPPORTED_TYPES: tuple[str, ...] = (
    "text/plain",
    "text/markdown",
    "application/json",
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
)

IMAGE_TYPES: tuple[str, ...] = tuple(t for t in SUPPORTED_TYPES if t.startswith("image/"))


class FragmentKind(StrEnum):
    """Conversion family of a supported mime type."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    IMAGE = "image"


_KINDS: dict[str, FragmentKind] = {
    "text/plain": FragmentKind.TEXT,
    "text/markdown": FragmentKind.MARKDOWN,
    "application/json": FragmentKind.JSON,
    **{t: FragmentKind.IMAGE for t in IMAGE_TYPES},
}


def base_mime_type(content_type: str) -> str:
    """Strip ``;``-delimited parameters from a content type."""
    return content_type.split(";", 1)[0].strip().lower()


def is_supported_type(content_type: str) -> bool:
    return base_mime_type(content_type) in SUPPORTED_TYPES


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Fragment:
    """Metadata of a stored fragment.

    ``size`` tracks the byte length of the last payload written through
    :func:`fragments.core.fragments.set_fragment_data`. The payload itself
    lives in the store, never on this object.
    """

    owner_id: str
    type: str
    size: int = 0
    created: datetime = field(default_factory=_utcnow)
    updated: datetime | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.owner_id:
            raise ValidationError("owner_id is required")
        if not self.type:
            raise ValidationError("type is required")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise ValidationError("size must be an integer >= 0")
        if not is_supported_type(self.type):
            raise ValidationError(f"Unsupported fragment type: {self.type}")
        if not self.id:
            self.id = _new_id()
        if self.updated is None:
            self.updated = self.created

    @property
    def mime_type(self) -> str:
        return base_mime_type(self.type)

    @property
    def kind(self) -> FragmentKind:
        return _KINDS[self.mime_type]

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def is_json(self) -> bool:
        return self.mime_type == "application/json"

    @property
    def is_markdown(self) -> bool:
        return self.mime_type == "text/markdown"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def formats(self) -> list[str]:
        """Content types this fragment can be served as, its own type first."""
        formats = [self.mime_type]
        if self.is_markdown:
            formats.append("text/html")
        if self.is_json:
            formats.append("text/plain")
        if self.is_image:
            formats.extend(t for t in IMAGE_TYPES if t != self.mime_type)
        return formats

    def touch(self) -> None:
        self.updated = _utcnow()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "type": self.type,
            "size": self.size,
            "created": self.created,
            "updated": self.updated,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Fragment:
        created = record["created"]
        updated = record.get("updated")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        if isinstance(updated, str):
            updated = datetime.fromisoformat(updated)
        return cls(
            id=record["id"],
            owner_id=record["owner_id"],
            type=record["type"],
            size=record.get("size", 0),
            created=created,
            updated=updated,
        )
