"""Archive item parsed from one manifest line."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from capsule.tools.date_check import is_valid_date


NEWS_TYPE = "НОВОСТЬ"
MEDIA_TYPE = "МЕДИА"

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".svg")
AUDIO_EXTENSIONS = (".mp3", ".wav", ".ogg", ".m4a", ".aac", ".flac")
VIDEO_EXTENSIONS = (".mp4", ".webm", ".avi", ".mov", ".wmv", ".flv")

TYPE_EMOJI = {
    "НОВОСТЬ": "📰",
    "МЕДИА": "🎬",
    "МЕМ": "😂",
    "ФОТО": "📸",
    "ВИДЕО": "🎥",
    "АУДИО": "🎵",
    "ДОКУМЕНТ": "📄",
    "ТЕКСТ": "📝",
    "КАРТИНКА": "🖼️",
    "СЫЛКА": "🔗",
    "СОБЫТИЕ": "📅",
    "ЛИЧНОЕ": "👤",
    "ОБУЧЕНИЕ": "📚",
    "РАБОТА": "💼",
    "ХОББИ": "🎨",
    "КАПСУЛА": "⏳",
}


class TypeCategory(str, Enum):
    """Item categories that change the manifest field layout."""
    CAPSULE = "КАПСУЛА"
    PERSONAL = "ЛИЧНОЕ"
    MEME = "МЕМ"
    GENERIC = "*"

    @classmethod
    def from_type(cls, value: str) -> "TypeCategory":
        """Classify a declared item type (trimmed, case-insensitive)."""
        normalized = (value or "").strip().upper()
        for category in (cls.CAPSULE, cls.PERSONAL, cls.MEME):
            if normalized == category.value:
                return category
        return cls.GENERIC

    @property
    def needs_explanation(self) -> bool:
        return self in (TypeCategory.PERSONAL, TypeCategory.MEME)


def is_pdf_filename(filename: str) -> bool:
    """True if the filename has a .pdf extension (any case)."""
    return filename.strip().lower().endswith(".pdf")


class ArchiveItem(BaseModel):
    """One bundled item described by the manifest."""
    model_config = ConfigDict(frozen=True)

    filename: str
    type: str
    title: str = ""
    description: str = ""
    date: str
    tags: list[str] = Field(default_factory=list)  # manifest order, duplicates kept
    author: str = ""  # КАПСУЛА only

    @field_validator("filename", "type")
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Filename and type are always present on a parsed item."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Date must have one of the accepted manifest shapes."""
        if not is_valid_date(v):
            raise ValueError(f"unsupported date format: {v!r}")
        return v

    @property
    def type_category(self) -> TypeCategory:
        return TypeCategory.from_type(self.type)

    @property
    def upper_type(self) -> str:
        return self.type.strip().upper()

    @property
    def file_extension(self) -> str:
        """Lower-cased extension including the dot, or ''."""
        parts = self.filename.split(".")
        return "." + parts[-1].lower() if len(parts) > 1 else ""

    @property
    def tag_count(self) -> int:
        return len(self.tags)

    @property
    def type_emoji(self) -> str:
        return TYPE_EMOJI.get(self.upper_type, "📁")

    def is_news(self) -> bool:
        return self.upper_type == NEWS_TYPE

    def is_media(self) -> bool:
        return self.upper_type == MEDIA_TYPE

    def is_meme(self) -> bool:
        return self.type_category is TypeCategory.MEME

    def is_personal(self) -> bool:
        return self.type_category is TypeCategory.PERSONAL

    def is_capsule(self) -> bool:
        return self.type_category is TypeCategory.CAPSULE

    def is_pdf(self) -> bool:
        return is_pdf_filename(self.filename)

    def is_image(self) -> bool:
        return self.filename.lower().endswith(IMAGE_EXTENSIONS)

    def is_audio(self) -> bool:
        return self.filename.lower().endswith(AUDIO_EXTENSIONS)

    def is_video(self) -> bool:
        return self.filename.lower().endswith(VIDEO_EXTENSIONS)

    def is_text(self) -> bool:
        return self.filename.lower().endswith(".txt")

    def is_csv(self) -> bool:
        return self.filename.lower().endswith(".csv")

    def has_minimum_tags(self, min_count: int = 5) -> bool:
        return len(self.tags) >= min_count

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive, whitespace-trimmed tag lookup."""
        wanted = tag.strip().lower()
        return any(t.strip().lower() == wanted for t in self.tags)
