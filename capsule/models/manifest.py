"""Manifest lines and the result of parsing a manifest."""
from pydantic import BaseModel, Field

from capsule.models.archive_item import ArchiveItem
from capsule.models.validation_error import ValidationError


class ManifestLine(BaseModel):
    """Single non-blank, non-comment manifest line."""
    line_number: int  # 1-based position in the original text
    raw_text: str

    @property
    def fields(self) -> list[str]:
        return [part.strip() for part in self.raw_text.split("|")]

    @property
    def separator_count(self) -> int:
        return self.raw_text.count("|")


class ManifestParseResult(BaseModel):
    """Items and errors, both in manifest line order."""
    items: list[ArchiveItem] = Field(default_factory=list)
    errors: list[ValidationError] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def filenames(self) -> list[str]:
        return [item.filename for item in self.items]
