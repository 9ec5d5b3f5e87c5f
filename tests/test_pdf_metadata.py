"""Tests for capsule.tools.pdf_metadata."""
from datetime import datetime, timezone

import pytest

from capsule.tools.pdf_metadata import extract_pdf_metadata, split_keywords


def test_split_keywords() -> None:
    assert split_keywords("космос, луна ,,марс") == ["космос", "луна", "марс"]
    assert split_keywords(None) == []
    assert split_keywords(["a", " ", "b"]) == ["a", "b"]


def test_not_a_pdf_returns_none() -> None:
    assert extract_pdf_metadata(b"definitely not a pdf") is None


def test_reads_info_dictionary() -> None:
    pymupdf = pytest.importorskip("pymupdf")

    doc = pymupdf.open()
    doc.new_page()
    doc.set_metadata({
        "title": "Новость дня",
        "subject": "Наука",
        "author": "Редакция",
        "keywords": "космос, луна",
        "creationDate": "D:20241020153000+03'00'",
    })
    data = doc.tobytes()
    doc.close()

    metadata = extract_pdf_metadata(data)

    assert metadata.title == "Новость дня"
    assert metadata.description == "Наука"
    assert metadata.author == "Редакция"
    assert metadata.keywords == ["космос", "луна"]
    assert metadata.created_at == datetime(2024, 10, 20, 12, 30, tzinfo=timezone.utc)


def test_extraction_writes_nothing_to_stdout(capsys) -> None:
    pymupdf = pytest.importorskip("pymupdf")

    with pymupdf.open() as doc:
        doc.new_page()
        doc.set_metadata({"title": "Тихо"})
        data = doc.tobytes()
    capsys.readouterr()

    assert extract_pdf_metadata(data).title == "Тихо"
    assert capsys.readouterr().out == ""
