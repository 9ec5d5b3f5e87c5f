"""End-to-end capsule inspection: manifest -> items -> metadata -> score."""
import logging
from typing import Optional

from capsule.config import DEFAULT_POLICY, ScoringPolicy
from capsule.models.inspection import InspectionResult
from capsule.tools.archive_storage import ArchiveStorage
from capsule.tools.manifest_io import load_manifest_text
from capsule.tools.manifest_parse import parse_manifest
from capsule.tools.metadata_merge import MetadataExtractor, enrich_items
from capsule.tools.observer import EngineObserver, observe
from capsule.tools.scoring import score_archive
from capsule.tools.structure import compute_statistics


logger = logging.getLogger(__name__)


async def inspect_archive(
    storage: ArchiveStorage,
    *,
    metadata_extractor: Optional[MetadataExtractor] = None,
    policy: Optional[ScoringPolicy] = None,
    observer: Optional[EngineObserver] = None
) -> InspectionResult:
    """
    Inspect an archive and score its completeness.

    A manifest with errors stops the run before scoring; the errors are
    returned for display. Per-item read failures never stop it.

    Args:
        storage: Archive storage collaborator
        metadata_extractor: Optional callable(bytes) -> ExtractedMetadata for PDFs
        policy: Completion policy (defaults to DEFAULT_POLICY)
        observer: Optional operation observer

    Raises:
        ManifestNotFoundError: the archive has no manifest
    """
    policy = policy or DEFAULT_POLICY

    with observe(observer, "inspect_archive", manifest=policy.manifest_name) as result:
        file_listing = storage.list_files()
        text = await load_manifest_text(storage, policy.manifest_name, file_listing)

        parsed = parse_manifest(text, observer=observer)
        if parsed.errors:
            logger.info("Manifest has %d error(s); skipping scoring", len(parsed.errors))
            result.update(errors=len(parsed.errors))
            return InspectionResult(
                manifest_name=policy.manifest_name,
                items=parsed.items,
                errors=parsed.errors,
                statistics=compute_statistics(parsed.items),
            )

        items = parsed.items
        if metadata_extractor is not None:
            items = await enrich_items(items, storage, metadata_extractor, observer=observer)

        report = await score_archive(items, file_listing, storage, policy, observer=observer)
        result.update(percentage=report.percentage)

    return InspectionResult(
        manifest_name=policy.manifest_name,
        items=items,
        report=report,
        statistics=compute_statistics(items),
    )
