"""Tests for capsule.tools.inspection and capsule.tools.manifest_io."""
import asyncio

import pytest

from capsule.config import ScoringPolicy
from capsule.models.metadata import ExtractedMetadata
from capsule.tools.archive_storage import InMemoryArchiveStorage
from capsule.tools.errors import CapsuleError, ManifestNotFoundError
from capsule.tools.inspection import inspect_archive
from capsule.tools.manifest_io import find_manifest, load_manifest_text

from conftest import words


TAGS = "t1,t2,t3,t4,t5"


def _complete_files(news_line) -> dict:
    lines = ["# Капсула времени", ""]
    files = {}
    for i in range(1, 6):
        name = f"0{i}_Новость.pdf"
        lines.append(news_line(name))
        files[name] = b"%PDF-1.4"
    for i in (6, 7):
        name = f"0{i}_Личное.jpg"
        lines.append(f"{name} | ЛИЧНОЕ | 2024-01-0{i - 5} | Мой день | {TAGS}")
        files[name] = b""
        files[f"0{i}_Личное_объяснение.txt"] = words(120)
    for i in range(8, 13):
        name = f"{i:02d}_Мем.png"
        lines.append(f"{name} | МЕМ | 2024-02-02 | Мем | {TAGS}")
        files[name] = b""
        files[f"{i:02d}_Мем_объяснение.txt"] = words(55)
    lines.append("capsule.txt | КАПСУЛА | 2024-05-01 | Иван Иванов")
    files["capsule.txt"] = "Дорогой будущий я"
    files["manifest.txt"] = "\n".join(lines)
    return files


def test_find_manifest() -> None:
    assert find_manifest(["a", "manifest.txt"], "manifest.txt") == "manifest.txt"
    assert find_manifest(["MANIFEST.TXT"], "manifest.txt") == "MANIFEST.TXT"
    assert find_manifest(["a.txt"], "manifest.txt") is None


def test_load_manifest_text_missing() -> None:
    storage = InMemoryArchiveStorage({"a.png": b""})
    with pytest.raises(ManifestNotFoundError) as exc:
        asyncio.run(load_manifest_text(storage, "manifest.txt"))
    assert exc.value.manifest_name == "manifest.txt"
    assert isinstance(exc.value, CapsuleError)


def test_inspect_without_manifest_raises() -> None:
    storage = InMemoryArchiveStorage({"a.png": b""})
    with pytest.raises(ManifestNotFoundError):
        asyncio.run(inspect_archive(storage))


def test_inspect_manifest_errors_skip_scoring() -> None:
    storage = InMemoryArchiveStorage({
        "manifest.txt": "01.pdf | НОВОСТЬ | 2024-10-20\nbroken line",
        "01.pdf": b"",
    })

    result = asyncio.run(inspect_archive(storage))

    assert result.has_errors
    assert result.report is None
    assert [e.line_number for e in result.errors] == [2]
    assert result.statistics.total_items == 1


def test_inspect_complete_archive_with_metadata() -> None:
    files = _complete_files(lambda name: f"{name} | НОВОСТЬ | 2024-10-20")
    storage = InMemoryArchiveStorage(files)

    def extractor(data: bytes):
        return ExtractedMetadata(title="Новость дня", keywords=["k1", "k2", "k3", "k4", "k5"])

    result = asyncio.run(inspect_archive(storage, metadata_extractor=extractor))

    assert not result.has_errors
    assert result.report.percentage == 100
    assert result.report.is_consistent
    assert all(item.title == "Новость дня" for item in result.items if item.is_news())
    assert result.statistics.items_by_type["МЕМ"] == 5


def test_inspect_without_metadata_leaves_pdf_tags_empty() -> None:
    files = _complete_files(lambda name: f"{name} | НОВОСТЬ | 2024-10-20")
    storage = InMemoryArchiveStorage(files)

    result = asyncio.run(inspect_archive(storage))

    report = result.report
    assert report.tags.achieved == 8
    assert report.tags.required == 13
    assert report.achieved == 5 + 2 + 5 + 8 + 2 + 5 + 1
    assert report.percentage == 85


def test_inspect_custom_manifest_name() -> None:
    files = _complete_files(lambda name: f"{name} | НОВОСТЬ | 2024-10-20 | {TAGS}")
    files["опись.txt"] = files.pop("manifest.txt")
    storage = InMemoryArchiveStorage(files)

    result = asyncio.run(inspect_archive(storage, policy=ScoringPolicy(manifest_name="опись.txt")))

    assert result.manifest_name == "опись.txt"
    assert result.report.extra_files == []
    assert result.report.percentage == 100


class RecordingObserver:
    def __init__(self):
        self.names = []
        self.failures = []

    def operation_started(self, name, context):
        self.names.append(name)

    def operation_finished(self, name, context):
        pass

    def operation_failed(self, name, error):
        self.failures.append((name, type(error)))


def test_inspect_reports_operations() -> None:
    files = _complete_files(lambda name: f"{name} | НОВОСТЬ | 2024-10-20 | {TAGS}")
    observer = RecordingObserver()

    asyncio.run(inspect_archive(InMemoryArchiveStorage(files), observer=observer))

    assert observer.names == [
        "inspect_archive", "parse_manifest", "score_archive", "validate_explanations",
    ]


def test_inspect_reports_failure() -> None:
    observer = RecordingObserver()
    with pytest.raises(ManifestNotFoundError):
        asyncio.run(inspect_archive(InMemoryArchiveStorage({}), observer=observer))
    assert observer.failures == [("inspect_archive", ManifestNotFoundError)]
