"""Merge embedded file metadata into parsed items before scoring."""
import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from capsule.models.archive_item import ArchiveItem
from capsule.models.metadata import ExtractedMetadata
from capsule.tools.archive_storage import ArchiveStorage
from capsule.tools.observer import EngineObserver, observe
from capsule.tools.sanitize import sanitize_text


logger = logging.getLogger(__name__)

# Longest metadata title still usable as a fallback tag
MAX_TITLE_TAG_LENGTH = 50

MetadataExtractor = Callable[
    [bytes],
    Union[Optional[ExtractedMetadata], Awaitable[Optional[ExtractedMetadata]]],
]


def _append_unique(tags: list[str], candidates: list[str]) -> list[str]:
    """Append candidates not already present (case-insensitive, trimmed)."""
    merged = list(tags)
    seen = {tag.strip().lower() for tag in merged}
    for candidate in candidates:
        key = candidate.strip().lower()
        if key and key not in seen:
            seen.add(key)
            merged.append(candidate.strip())
    return merged


def merge_metadata(item: ArchiveItem, metadata: Optional[ExtractedMetadata]) -> ArchiveItem:
    """
    Return a copy of ``item`` updated from its embedded metadata.

    Non-empty title and description replace the manifest values; without a
    description the author is shown instead. Keywords are appended when not
    already tagged. A НОВОСТЬ item without keywords gets its description,
    author and a short title as tags instead.
    """
    if metadata is None or metadata.is_empty():
        return item

    # Manifest fields are stored escaped; compare and store metadata the same way
    title = sanitize_text(metadata.title)
    description = sanitize_text(metadata.description)
    author = sanitize_text(metadata.author)
    keywords = [sanitize_text(keyword) for keyword in metadata.keywords]

    update: dict = {}
    if title:
        update["title"] = title
    if description:
        update["description"] = description
    elif author:
        update["description"] = f"Автор: {author}"

    if keywords:
        tags = _append_unique(item.tags, keywords)
    elif item.is_news():
        fallback = [description, author]
        if len(metadata.title) <= MAX_TITLE_TAG_LENGTH:
            fallback.append(title)
        tags = _append_unique(item.tags, [tag for tag in fallback if tag])
    else:
        tags = item.tags

    if len(tags) != len(item.tags):
        update["tags"] = tags
        logger.debug("Added %d tag(s) to %s from metadata", len(tags) - len(item.tags), item.filename)

    return item.model_copy(update=update) if update else item


def wants_metadata(item: ArchiveItem) -> bool:
    """PDF items take their title/tags from the file, except ЛИЧНОЕ ones."""
    return item.is_pdf() and not item.is_personal()


async def _fetch_metadata(
    item: ArchiveItem,
    storage: ArchiveStorage,
    extractor: MetadataExtractor
) -> Optional[ExtractedMetadata]:
    data = await storage.extract_bytes(item.filename)
    metadata = extractor(data)
    if inspect.isawaitable(metadata):
        metadata = await metadata
    return metadata


async def enrich_items(
    items: list[ArchiveItem],
    storage: ArchiveStorage,
    extractor: MetadataExtractor,
    observer: Optional[EngineObserver] = None
) -> list[ArchiveItem]:
    """
    Fetch and merge metadata for every eligible item concurrently.

    A failure for one item is logged and leaves that item unchanged.

    Returns:
        New item list in the original order
    """
    targets = [i for i, item in enumerate(items) if wants_metadata(item)]

    with observe(observer, "enrich_items", items=len(targets)) as result:
        fetched = await asyncio.gather(
            *(_fetch_metadata(items[i], storage, extractor) for i in targets),
            return_exceptions=True,
        )

        enriched = list(items)
        failed = 0
        for index, metadata in zip(targets, fetched):
            item = items[index]
            if isinstance(metadata, BaseException):
                if not isinstance(metadata, Exception):
                    raise metadata
                failed += 1
                logger.warning("Failed to extract metadata for %s: %s", item.filename, metadata)
                continue
            enriched[index] = merge_metadata(item, metadata)

        logger.info("Metadata merged for %d item(s), %d failed", len(targets) - failed, failed)
        result.update(merged=len(targets) - failed, failed=failed)

    return enriched
