"""Manifest I/O: locate and read the manifest inside an archive."""
import logging
from typing import Optional

from capsule.tools.archive_storage import ArchiveStorage
from capsule.tools.errors import ArchiveFileNotFound, ManifestNotFoundError


logger = logging.getLogger(__name__)


def find_manifest(file_listing: list[str], manifest_name: str) -> Optional[str]:
    """
    Archive entry holding the manifest.

    An exact name wins; otherwise the first case-insensitive match is used.
    """
    if manifest_name in file_listing:
        return manifest_name
    wanted = manifest_name.lower()
    for name in file_listing:
        if name.lower() == wanted:
            return name
    return None


async def load_manifest_text(
    storage: ArchiveStorage,
    manifest_name: str,
    file_listing: Optional[list[str]] = None
) -> str:
    """
    Read the manifest text from the archive.

    Raises:
        ManifestNotFoundError: the archive has no manifest entry
    """
    if file_listing is None:
        file_listing = storage.list_files()

    entry = find_manifest(file_listing, manifest_name)
    if entry is None:
        raise ManifestNotFoundError(manifest_name)

    try:
        text = await storage.extract_text(entry)
    except ArchiveFileNotFound as e:
        raise ManifestNotFoundError(manifest_name) from e

    logger.debug("Read manifest %s (%d characters)", entry, len(text))
    return text
