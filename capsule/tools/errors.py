"""Exceptions raised by the capsule engine and its storage adapters."""
import errno


class CapsuleError(Exception):
    """Base class for capsule inspection failures."""


class ManifestNotFoundError(CapsuleError):
    """The archive has no manifest file; nothing can be inspected."""

    def __init__(self, manifest_name: str):
        self.manifest_name = manifest_name
        super().__init__(f"Manifest not found in archive: {manifest_name}")


class ArchiveFileNotFound(CapsuleError, FileNotFoundError):
    """A requested entry does not exist in the archive (``filename`` holds its name)."""

    def __init__(self, filename: str):
        super().__init__(errno.ENOENT, "File not found in archive", filename)
