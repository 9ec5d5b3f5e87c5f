"""Metadata returned by the PDF/image metadata collaborator."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ExtractedMetadata(BaseModel):
    """Optional descriptive values embedded in an item's file."""
    title: str = ""
    description: str = ""
    author: str = ""
    keywords: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None  # from the PDF CreationDate

    @field_validator("title", "description", "author", mode="before")
    @classmethod
    def coerce_text(cls, v) -> str:
        """Missing values come through as None from most extractors."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v: list[str]) -> list[str]:
        """Drop blanks and duplicates, keep first-seen order."""
        seen = set()
        cleaned = []
        for keyword in v:
            keyword = keyword.strip()
            key = keyword.lower()
            if keyword and key not in seen:
                seen.add(key)
                cleaned.append(keyword)
        return cleaned

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.author or self.keywords)
