"""Completion policy: thresholds and naming conventions used by the engine."""
from pydantic import BaseModel, ConfigDict, Field, field_validator


EXPLANATION_SUFFIXES = (
    "_объяснение.txt",
    "_explanation.txt",
    "_info.txt",
    "_description.txt",
    "_details.txt",
)


class ScoringPolicy(BaseModel):
    """Fixed category/tag/explanation thresholds for a complete capsule."""
    model_config = ConfigDict(frozen=True)

    required_news: int = 5
    required_personal: int = 2
    required_memes: int = 5
    required_capsule: int = 1
    min_tags: int = 5
    personal_words: int = 100
    meme_words: int = 50
    manifest_name: str = "manifest.txt"
    explanation_suffixes: tuple[str, ...] = Field(default=EXPLANATION_SUFFIXES)

    @field_validator(
        "required_news", "required_personal", "required_memes",
        "required_capsule", "min_tags", "personal_words", "meme_words",
    )
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Thresholds cannot be negative."""
        if v < 0:
            raise ValueError("thresholds must be non-negative")
        return v

    @field_validator("manifest_name")
    @classmethod
    def validate_manifest_name(cls, v: str) -> str:
        """Manifest name must be a non-empty archive entry name."""
        v = v.strip()
        if not v:
            raise ValueError("manifest_name must not be empty")
        return v


DEFAULT_POLICY = ScoringPolicy()
