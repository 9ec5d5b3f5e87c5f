"""Completion report models: how far an archive is from the required set."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CategoryScore(BaseModel):
    """Achieved vs required for one requirement category."""
    name: str
    achieved: int
    required: int
    passed: bool

    @property
    def ratio(self) -> float:
        """Fraction in [0, 1]; an empty requirement counts as met."""
        if self.required <= 0:
            return 1.0
        return min(1.0, self.achieved / self.required)


class TagCheck(BaseModel):
    """Tag sufficiency of one non-capsule item."""
    filename: str
    title: str = ""
    type: str
    is_pdf: bool = False
    tag_count: int
    required_tags: int
    passed: bool

    @property
    def remaining(self) -> int:
        return max(0, self.required_tags - self.tag_count)


class ExplanationCheck(BaseModel):
    """Explanation word count of one ЛИЧНОЕ/МЕМ item."""
    filename: str
    type: str
    title: str = ""
    explanation_file: Optional[str] = None
    word_count: int = 0
    required_words: int = 0
    passed: bool = False
    error: Optional[str] = None  # read failure or "not found", kept for diagnostics


class ExplanationSummary(BaseModel):
    """Aggregated explanation checks for a whole archive."""
    valid_personal: int = 0
    valid_memes: int = 0
    total_personal: int = 0
    total_memes: int = 0
    details: list[ExplanationCheck] = Field(default_factory=list)

    @property
    def resolved_files(self) -> list[str]:
        return [d.explanation_file for d in self.details if d.explanation_file]


class CompletionReport(BaseModel):
    """Score of an archive against the category/tag/explanation policy."""
    news: CategoryScore
    personal: CategoryScore
    memes: CategoryScore
    capsule: CategoryScore
    tags: CategoryScore
    personal_explanations: CategoryScore
    meme_explanations: CategoryScore
    tag_checks: list[TagCheck] = Field(default_factory=list)
    explanation_checks: list[ExplanationCheck] = Field(default_factory=list)
    extra_files: list[str] = Field(default_factory=list)
    missing_files: list[str] = Field(default_factory=list)
    achieved: int
    required: int
    percentage: int

    @field_validator("percentage")
    @classmethod
    def validate_percentage(cls, v: int) -> int:
        """Ensure percentage is between 0 and 100."""
        if not 0 <= v <= 100:
            raise ValueError("percentage must be between 0 and 100")
        return v

    @property
    def categories(self) -> list[CategoryScore]:
        return [
            self.news,
            self.personal,
            self.memes,
            self.tags,
            self.personal_explanations,
            self.meme_explanations,
            self.capsule,
        ]

    @property
    def is_complete(self) -> bool:
        return self.percentage >= 100

    @property
    def is_consistent(self) -> bool:
        """True when the manifest and archive listing agree."""
        return not self.extra_files and not self.missing_files


class ArchiveStatistics(BaseModel):
    """Descriptive statistics over parsed items."""
    total_items: int = 0
    items_by_type: dict[str, int] = Field(default_factory=dict)
    tag_count: int = 0
    earliest_date: Optional[datetime] = None
    latest_date: Optional[datetime] = None
