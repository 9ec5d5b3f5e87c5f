"""Result of inspecting a whole capsule archive."""
from typing import Optional

from pydantic import BaseModel, Field

from capsule.models.archive_item import ArchiveItem
from capsule.models.completion import ArchiveStatistics, CompletionReport
from capsule.models.validation_error import ValidationError


class InspectionResult(BaseModel):
    """Parsed items, manifest errors and, for a valid manifest, the score."""
    manifest_name: str
    items: list[ArchiveItem] = Field(default_factory=list)
    errors: list[ValidationError] = Field(default_factory=list)
    report: Optional[CompletionReport] = None  # None when the manifest has errors
    statistics: ArchiveStatistics = Field(default_factory=ArchiveStatistics)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
