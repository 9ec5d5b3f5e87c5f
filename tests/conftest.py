"""Shared fixtures for capsule tests."""
import pytest

from capsule.models.archive_item import ArchiveItem
from capsule.tools.archive_storage import InMemoryArchiveStorage


def words(count: int, word: str = "слово") -> str:
    return " ".join([word] * count)


@pytest.fixture
def make_item():
    """Factory for ArchiveItem with sensible defaults."""
    def _make(filename: str, type: str, **fields) -> ArchiveItem:
        fields.setdefault("date", "2024-10-20")
        return ArchiveItem(filename=filename, type=type, **fields)
    return _make


@pytest.fixture
def memory_storage():
    """Factory for in-memory archive storage from a {name: content} dict."""
    def _storage(files: dict) -> InMemoryArchiveStorage:
        return InMemoryArchiveStorage(files)
    return _storage


@pytest.fixture
def five_tags() -> list[str]:
    return ["t1", "t2", "t3", "t4", "t5"]
