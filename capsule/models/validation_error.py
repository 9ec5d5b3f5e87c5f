"""Structured manifest/archive validation errors."""
from typing import Literal

from pydantic import BaseModel, Field


ErrorKind = Literal[
    "format",  # line matches no schema, bad date, empty required field
    "delimiter",  # inconsistent spacing around '|'
    "insufficient_fields",  # below every schema's minimum
    "missing_file",  # manifest entry absent from the archive
    "missing_manifest",
    "read",  # storage failed to produce bytes/text
]

Severity = Literal["critical", "high", "medium"]


class ProblematicPart(BaseModel):
    """Diagnostic for a single pipe-separated field of an offending line."""
    index: int
    raw_text: str = ""
    field_name: str
    is_empty: bool = False
    is_problematic: bool = False
    is_within_expected_count: bool = True
    is_missing: bool = False  # synthesized, not present in the source line


class ValidationError(BaseModel):
    """What is wrong with one manifest line (or with the archive)."""
    line_number: int  # 1-based, blank and comment lines counted
    raw_line: str
    message: str
    expected_format_hint: str = ""
    kind: ErrorKind = "format"
    problematic_parts: list[ProblematicPart] = Field(default_factory=list)

    @property
    def severity(self) -> Severity:
        if self.kind in ("missing_file", "missing_manifest"):
            return "critical"
        if self.kind in ("format", "delimiter", "insufficient_fields"):
            return "high"
        return "medium"

    def is_critical(self) -> bool:
        return self.severity == "critical"

    def is_format_error(self) -> bool:
        return self.kind in ("format", "delimiter", "insufficient_fields")

    def summary(self) -> str:
        """Short one-line description, e.g. for a list view."""
        return f"Line {self.line_number}: {self.message}"

    def problematic_fields(self) -> list[str]:
        return [p.field_name for p in self.problematic_parts if p.is_problematic]

    def empty_fields(self) -> list[str]:
        return [p.field_name for p in self.problematic_parts if p.is_empty]

    def missing_fields(self) -> list[str]:
        return [p.field_name for p in self.problematic_parts if p.is_missing]
