"""Archive storage adapters: file listing and per-entry reads."""
import asyncio
import logging
import threading
import zipfile
from pathlib import Path
from typing import Optional, Protocol, Union

from capsule.tools.errors import ArchiveFileNotFound


logger = logging.getLogger(__name__)


class ArchiveStorage(Protocol):
    """What the engine needs from an extracted archive."""

    def list_files(self) -> list[str]: ...

    async def extract_text(self, filename: str) -> str: ...

    async def extract_bytes(self, filename: str) -> bytes: ...


def decode_text(data: bytes) -> str:
    """Decode archive text as UTF-8, tolerating a BOM and bad bytes."""
    return data.decode("utf-8-sig", errors="replace")


class InMemoryArchiveStorage:
    """Archive whose entries are already held in memory."""

    def __init__(self, files: dict[str, Union[bytes, str]]):
        self._files: dict[str, bytes] = {}
        for name, content in files.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            self._files[name] = content

    def list_files(self) -> list[str]:
        return list(self._files)

    async def extract_bytes(self, filename: str) -> bytes:
        if filename not in self._files:
            raise ArchiveFileNotFound(filename)
        return self._files[filename]

    async def extract_text(self, filename: str) -> str:
        return decode_text(await self.extract_bytes(filename))


class DirectoryArchiveStorage:
    """Archive already unpacked into a directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        if not self.root.is_dir():
            raise NotADirectoryError(f"Archive directory not found: {self.root}")

    def list_files(self) -> list[str]:
        """Relative POSIX paths of every regular file, sorted."""
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in self.root.rglob("*")
            if path.is_file()
        )

    def _resolve(self, filename: str) -> Path:
        path = (self.root / filename).resolve()
        root = self.root.resolve()
        if root not in path.parents or not path.is_file():
            raise ArchiveFileNotFound(filename)
        return path

    async def extract_bytes(self, filename: str) -> bytes:
        path = self._resolve(filename)
        return await asyncio.to_thread(path.read_bytes)

    async def extract_text(self, filename: str) -> str:
        return decode_text(await self.extract_bytes(filename))


class ZipArchiveStorage:
    """
    Archive backed by a ZIP file.

    Keeps the ZIP handle open until ``close()``; use as a context manager.
    Reads go through a lock because a ZipFile handle is not safe to share
    between threads.
    """

    def __init__(self, zip_path: Path):
        self.zip_path = Path(zip_path)
        self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(self.zip_path)
        self._names = [info.filename for info in self._zip.infolist() if not info.is_dir()]
        self._lock = threading.Lock()
        logger.debug("Opened %s with %d file(s)", self.zip_path, len(self._names))

    def list_files(self) -> list[str]:
        return list(self._names)

    async def extract_bytes(self, filename: str) -> bytes:
        if self._zip is None:
            raise ValueError("Archive is closed")
        if filename not in self._names:
            raise ArchiveFileNotFound(filename)
        return await asyncio.to_thread(self._read, filename)

    def _read(self, filename: str) -> bytes:
        with self._lock:
            return self._zip.read(filename)

    async def extract_text(self, filename: str) -> str:
        return decode_text(await self.extract_bytes(filename))

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ZipArchiveStorage":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_archive(path: Path) -> Union[ZipArchiveStorage, DirectoryArchiveStorage]:
    """Open a .zip file or an unpacked directory as archive storage."""
    path = Path(path)
    if path.is_dir():
        return DirectoryArchiveStorage(path)
    if not path.exists():
        raise FileNotFoundError(f"Archive not found: {path}")
    return ZipArchiveStorage(path)
