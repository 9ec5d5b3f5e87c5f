"""
Manifest schema variants and their resolution.

A manifest line is laid out according to one of a small fixed set of
variants, chosen by whether the item is a PDF, by the declared item type
and by the number of pipe-separated fields.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from capsule.models.archive_item import TypeCategory, is_pdf_filename


class FileClass(str, Enum):
    PDF = "pdf"
    OTHER = "other"

    @classmethod
    def from_filename(cls, filename: str) -> "FileClass":
        return cls.PDF if is_pdf_filename(filename) else cls.OTHER


@dataclass(frozen=True)
class SchemaVariant:
    """One field layout of a manifest line."""
    name: str
    file_class: FileClass
    categories: frozenset
    fields: tuple
    required: frozenset  # fields that must be non-empty
    open_ended: bool = False  # accepts more fields than listed; extras ignored
    example: str = ""

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def accepts(self, count: int) -> bool:
        if self.open_ended:
            return count >= self.field_count
        return count == self.field_count

    def field_name(self, index: int) -> str:
        if index < self.field_count:
            return self.fields[index]
        return "extra"

    @property
    def layout(self) -> str:
        """Human readable field order, e.g. 'filename | type | date'."""
        layout = " | ".join(self.fields)
        return layout + " | ..." if self.open_ended else layout


_GENERIC = frozenset({TypeCategory.GENERIC})
_PERSONAL_OR_MEME = frozenset({TypeCategory.PERSONAL, TypeCategory.MEME})
_CAPSULE = frozenset({TypeCategory.CAPSULE})

OTHER_CAPSULE = SchemaVariant(
    name="other_capsule",
    file_class=FileClass.OTHER,
    categories=_CAPSULE,
    fields=("filename", "type", "date", "author"),
    required=frozenset({"filename", "type", "date", "author"}),
    example="capsule.txt | КАПСУЛА | 2024-05-01 | Иван Иванов",
)
OTHER_PERSONAL_MEME = SchemaVariant(
    name="other_personal_meme",
    file_class=FileClass.OTHER,
    categories=_PERSONAL_OR_MEME,
    fields=("filename", "type", "date", "title", "tags"),
    required=frozenset({"filename", "type", "date"}),
    example="05_Мем.png | МЕМ | 2024-10-20 | Заголовок | тег1,тег2,тег3,тег4,тег5",
)
OTHER_GENERIC = SchemaVariant(
    name="other_generic",
    file_class=FileClass.OTHER,
    categories=_GENERIC,
    fields=("filename", "type", "title", "description", "date", "tags"),
    required=frozenset({"filename", "type", "title", "description", "date"}),
    open_ended=True,
    example="02_Медиа.mp3 | МЕДИА | Заголовок | Описание | 2024-10-15 | тег1,тег2,тег3",
)
PDF_BARE = SchemaVariant(
    name="pdf_bare",
    file_class=FileClass.PDF,
    categories=_GENERIC,
    fields=("filename", "type", "date"),
    required=frozenset({"filename", "type", "date"}),
    example="01_Новость.pdf | НОВОСТЬ | 2024-10-20",
)
PDF_LEGACY_TAGS = SchemaVariant(
    name="pdf_legacy_tags",
    file_class=FileClass.PDF,
    categories=_GENERIC,
    fields=("filename", "type", "date", "tags"),
    required=frozenset({"filename", "type", "date"}),
    example="01_Новость.pdf | НОВОСТЬ | 2024-10-20 | тег1,тег2,тег3",
)
PDF_PERSONAL_MEME = SchemaVariant(
    name="pdf_personal_meme",
    file_class=FileClass.PDF,
    categories=_PERSONAL_OR_MEME,
    fields=("filename", "type", "date", "title", "tags"),
    required=frozenset({"filename", "type", "date"}),
    example="03_Личное.pdf | ЛИЧНОЕ | 2024-10-20 | Заголовок | тег1,тег2,тег3,тег4,тег5",
)
PDF_GENERIC = SchemaVariant(
    name="pdf_generic",
    file_class=FileClass.PDF,
    categories=_GENERIC,
    fields=("filename", "type", "title", "description", "date", "tags"),
    required=frozenset({"filename", "type", "date"}),
    open_ended=True,
    example="01_Новость.pdf | НОВОСТЬ | Заголовок | Описание | 2024-10-20 | тег1,тег2,тег3",
)

SCHEMA_VARIANTS = (
    OTHER_CAPSULE,
    OTHER_PERSONAL_MEME,
    OTHER_GENERIC,
    PDF_BARE,
    PDF_LEGACY_TAGS,
    PDF_PERSONAL_MEME,
    PDF_GENERIC,
)

MIN_FIELD_COUNT = min(v.field_count for v in SCHEMA_VARIANTS)


def variants_for(file_class: FileClass, category: TypeCategory) -> list[SchemaVariant]:
    """All variants declared for a (file class, type category) combination."""
    return [
        v for v in SCHEMA_VARIANTS
        if v.file_class is file_class and category in v.categories
    ]


def resolve_schema(
    filename: str,
    type_value: str,
    field_count: int
) -> Optional[SchemaVariant]:
    """
    Pick the variant for a line, or None when the field count fits none.

    Args:
        filename: First field of the line (only its extension matters)
        type_value: Second field, the declared item type
        field_count: Number of pipe-separated fields
    """
    file_class = FileClass.from_filename(filename)
    category = TypeCategory.from_type(type_value)

    for variant in variants_for(file_class, category):
        if variant.accepts(field_count):
            return variant
    return None


def best_guess_schema(
    filename: str,
    type_value: str,
    field_count: int
) -> SchemaVariant:
    """
    Closest variant for naming the fields of a line that resolved to none.

    Prefers the smallest variant of the line's combination that could hold
    all supplied fields, then the largest one. A combination without any
    variant (a PDF КАПСУЛА) borrows the layout of its category.
    """
    file_class = FileClass.from_filename(filename)
    category = TypeCategory.from_type(type_value)

    candidates = variants_for(file_class, category)
    if not candidates:
        candidates = [v for v in SCHEMA_VARIANTS if category in v.categories]
    if not candidates:
        return OTHER_GENERIC

    candidates = sorted(candidates, key=lambda v: v.field_count)
    for variant in candidates:
        if variant.field_count >= field_count:
            return variant
    return candidates[-1]


def expected_layouts(filename: str, type_value: str) -> list[str]:
    """Field orders accepted for the line's (file class, type category)."""
    file_class = FileClass.from_filename(filename)
    category = TypeCategory.from_type(type_value)
    return [v.layout for v in variants_for(file_class, category)]
