"""Reference image collections grouped by role."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from adgenius.utils.image_utils import split_data_uri


class ImageRole(str, Enum):
    """What a reference image is meant to influence."""

    MOOD = "mood"
    TALENT = "talent"
    PRODUCT = "product"


@dataclass(slots=True)
class InlineImage:
    """Image payload in the shape the provider expects."""

    data: str
    mime_type: str

    @classmethod
    def from_data_uri(cls, value: str) -> "InlineImage":
        mime_type, payload = split_data_uri(value)
        return cls(data=payload, mime_type=mime_type)


@dataclass(slots=True)
class ReferenceImages:
    """Three independent, upload-ordered lists of data-URI images."""

    mood: List[str] = field(default_factory=list)
    talent: List[str] = field(default_factory=list)
    product: List[str] = field(default_factory=list)

    @classmethod
    def from_lists(
        cls,
        mood: Optional[Iterable[str]] = None,
        talent: Optional[Iterable[str]] = None,
        product: Optional[Iterable[str]] = None,
    ) -> "ReferenceImages":
        """Build a snapshot; later edits to the source lists are not seen."""
        return cls(
            mood=[item for item in (mood or []) if item],
            talent=[item for item in (talent or []) if item],
            product=[item for item in (product or []) if item],
        )

    def by_role(self, role: ImageRole) -> List[str]:
        return {
            ImageRole.MOOD: self.mood,
            ImageRole.TALENT: self.talent,
            ImageRole.PRODUCT: self.product,
        }[role]

    def combined(self) -> List[str]:
        """All images, mood first, then talent, then product."""
        return [*self.mood, *self.talent, *self.product]

    def inline(self) -> List[InlineImage]:
        return [InlineImage.from_data_uri(item) for item in self.combined()]

    @property
    def count(self) -> int:
        return len(self.mood) + len(self.talent) + len(self.product)
