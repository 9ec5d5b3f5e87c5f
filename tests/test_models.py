"""Tests for capsule.models and capsule.config."""
import pydantic
import pytest

from capsule.config import DEFAULT_POLICY, ScoringPolicy
from capsule.models.archive_item import ArchiveItem
from capsule.models.completion import CategoryScore, CompletionReport
from capsule.models.metadata import ExtractedMetadata
from capsule.models.validation_error import ProblematicPart, ValidationError


def test_archive_item_requires_filename_type_and_date() -> None:
    with pytest.raises(pydantic.ValidationError):
        ArchiveItem(filename="", type="МЕМ", date="2024-01-01")
    with pytest.raises(pydantic.ValidationError):
        ArchiveItem(filename="a.png", type="  ", date="2024-01-01")
    with pytest.raises(pydantic.ValidationError):
        ArchiveItem(filename="a.png", type="МЕМ", date="01-01-2024")


def test_archive_item_is_frozen(make_item) -> None:
    item = make_item("a.png", "МЕМ")
    with pytest.raises(pydantic.ValidationError):
        item.title = "changed"


def test_archive_item_classification(make_item) -> None:
    item = make_item("Photo.JPG", " личное ", tags=["Лето", "море"])

    assert item.is_personal()
    assert item.upper_type == "ЛИЧНОЕ"
    assert item.file_extension == ".jpg"
    assert item.is_image()
    assert not item.is_pdf()
    assert item.type_emoji == "👤"
    assert item.has_tag(" лето ")
    assert not item.has_minimum_tags()
    assert make_item("x", "НЕЧТО").type_emoji == "📁"
    assert make_item("x", "НЕЧТО").file_extension == ""


def test_validation_error_helpers() -> None:
    error = ValidationError(
        line_number=4,
        raw_line="a.png | МЕМ",
        message="Insufficient fields",
        kind="insufficient_fields",
        problematic_parts=[
            ProblematicPart(index=0, raw_text="a.png", field_name="filename"),
            ProblematicPart(index=2, field_name="date", is_empty=True, is_problematic=True, is_missing=True),
        ],
    )

    assert error.summary() == "Line 4: Insufficient fields"
    assert error.severity == "high"
    assert error.is_format_error()
    assert not error.is_critical()
    assert error.problematic_fields() == ["date"]
    assert error.empty_fields() == ["date"]
    assert error.missing_fields() == ["date"]


def test_validation_error_rejects_unknown_kind() -> None:
    with pytest.raises(pydantic.ValidationError):
        ValidationError(line_number=1, raw_line="", message="", kind="oops")


def test_category_score_ratio() -> None:
    assert CategoryScore(name="news", achieved=3, required=5, passed=False).ratio == 0.6
    assert CategoryScore(name="news", achieved=7, required=5, passed=True).ratio == 1.0
    assert CategoryScore(name="memes", achieved=0, required=0, passed=True).ratio == 1.0


def test_completion_report_percentage_bounds() -> None:
    score = CategoryScore(name="x", achieved=0, required=0, passed=True)
    with pytest.raises(pydantic.ValidationError):
        CompletionReport(
            news=score, personal=score, memes=score, capsule=score, tags=score,
            personal_explanations=score, meme_explanations=score,
            achieved=0, required=0, percentage=101,
        )


def test_extracted_metadata_cleanup() -> None:
    metadata = ExtractedMetadata(title=None, author="  Автор ", keywords=["a", " A", "", "b "])

    assert metadata.title == ""
    assert metadata.author == "Автор"
    assert metadata.keywords == ["a", "b"]
    assert not metadata.is_empty()
    assert ExtractedMetadata().is_empty()


def test_scoring_policy_defaults() -> None:
    assert DEFAULT_POLICY.required_news == 5
    assert DEFAULT_POLICY.required_personal == 2
    assert DEFAULT_POLICY.required_memes == 5
    assert DEFAULT_POLICY.min_tags == 5
    assert DEFAULT_POLICY.personal_words == 100
    assert DEFAULT_POLICY.meme_words == 50
    assert DEFAULT_POLICY.explanation_suffixes[0] == "_объяснение.txt"


def test_scoring_policy_validation() -> None:
    with pytest.raises(pydantic.ValidationError):
        ScoringPolicy(min_tags=-1)
    with pytest.raises(pydantic.ValidationError):
        ScoringPolicy(manifest_name="   ")
    assert ScoringPolicy(manifest_name=" опись.txt ").manifest_name == "опись.txt"


@pytest.mark.parametrize("filename,type,expected", [
    ("clip.mp4", "МЕДИА", {"is_media", "is_video"}),
    ("song.MP3", "медиа", {"is_media", "is_audio"}),
    ("voice.ogg", "ЛИЧНОЕ", {"is_audio", "is_personal"}),
    ("letter.txt", "КАПСУЛА", {"is_text", "is_capsule"}),
    ("data.CSV", "ДОКУМЕНТ", {"is_csv"}),
    ("scan.pdf", "НОВОСТЬ", {"is_pdf", "is_news"}),
    ("funny.gif", "МЕМ", {"is_image", "is_meme"}),
])
def test_archive_item_predicates(make_item, filename: str, type: str, expected: set) -> None:
    predicates = [
        "is_news", "is_media", "is_meme", "is_personal", "is_capsule",
        "is_pdf", "is_image", "is_audio", "is_video", "is_text", "is_csv",
    ]
    item = make_item(filename, type)

    matched = {name for name in predicates if getattr(item, name)()}

    assert matched == expected
