"""Completion scoring of a parsed archive against the category policy."""
import logging
import math
from typing import Optional

from capsule.config import DEFAULT_POLICY, ScoringPolicy
from capsule.models.archive_item import ArchiveItem
from capsule.models.completion import CategoryScore, CompletionReport, TagCheck
from capsule.tools.archive_storage import ArchiveStorage
from capsule.tools.explanation import validate_explanations
from capsule.tools.observer import EngineObserver, observe


logger = logging.getLogger(__name__)


def check_tags(item: ArchiveItem, policy: ScoringPolicy = DEFAULT_POLICY) -> TagCheck:
    """
    Tag sufficiency of one item.

    ЛИЧНОЕ items also need a title. Every other item, PDFs included (their
    keywords are merged into tags beforehand), needs ``policy.min_tags``.
    """
    passed = item.has_minimum_tags(policy.min_tags)
    if item.is_personal():
        passed = passed and bool(item.title.strip())

    return TagCheck(
        filename=item.filename,
        title=item.title or item.filename,
        type=item.upper_type,
        is_pdf=item.is_pdf(),
        tag_count=item.tag_count,
        required_tags=policy.min_tags,
        passed=passed,
    )


def cross_reference_files(
    manifest_filenames: list[str],
    file_listing: list[str],
    ignored: Optional[list[str]] = None
) -> tuple[list[str], list[str]]:
    """
    Compare manifest entries with the archive listing, case-insensitively.

    Args:
        manifest_filenames: Filenames named by the manifest
        file_listing: Filenames present in the archive
        ignored: Archive files that are never "extra" (manifest, explanations)

    Returns:
        (extra_files, missing_files), each in listing/manifest order
    """
    manifest_lower = {name.lower() for name in manifest_filenames}
    listing_lower = {name.lower() for name in file_listing}
    ignored_lower = {name.lower() for name in (ignored or [])}

    extra = [
        name for name in file_listing
        if name.lower() not in manifest_lower and name.lower() not in ignored_lower
    ]

    missing = []
    seen = set()
    for name in manifest_filenames:
        key = name.lower()
        if key not in listing_lower and key not in seen:
            seen.add(key)
            missing.append(name)

    return extra, missing


def completion_percentage(achieved: int, required: int) -> int:
    """Rounded percentage (halves round up); 0 when nothing is required."""
    if required <= 0:
        return 0
    return int(math.floor(100 * achieved / required + 0.5))


async def score_archive(
    items: list[ArchiveItem],
    file_listing: list[str],
    storage: ArchiveStorage,
    policy: ScoringPolicy = DEFAULT_POLICY,
    observer: Optional[EngineObserver] = None
) -> CompletionReport:
    """
    Score parsed (and metadata-merged) items against the completion policy.

    Explanation read failures only fail the affected item; the report is
    always produced.

    Args:
        items: Parsed archive items
        file_listing: Every filename in the archive
        storage: Storage used to read explanation files
        policy: Thresholds to score against

    Returns:
        CompletionReport with category scores, per-item rows, file
        cross-reference and overall percentage
    """
    with observe(observer, "score_archive", items=len(items)) as result:
        news = sum(1 for item in items if item.is_news())
        personal = sum(1 for item in items if item.is_personal())
        memes = sum(1 for item in items if item.is_meme())
        capsules = sum(1 for item in items if item.is_capsule())
        capsule_present = capsules == policy.required_capsule

        tag_checks = [check_tags(item, policy) for item in items if not item.is_capsule()]
        # Capsule items are exempt from tag requirements and always pass
        tags_passing = capsules + sum(1 for check in tag_checks if check.passed)

        explanations = await validate_explanations(
            items, storage, file_listing, policy, observer=observer
        )

        extra, missing = cross_reference_files(
            [item.filename for item in items],
            file_listing,
            ignored=[policy.manifest_name] + explanations.resolved_files,
        )

        achieved = (
            min(news, policy.required_news)
            + min(personal, policy.required_personal)
            + min(memes, policy.required_memes)
            + tags_passing
            + explanations.valid_personal
            + explanations.valid_memes
            + (policy.required_capsule if capsule_present else 0)
        )
        required = (
            policy.required_news
            + policy.required_personal
            + policy.required_memes
            + len(items)
            + explanations.total_personal
            + explanations.total_memes
            + policy.required_capsule
        )

        report = CompletionReport(
            news=CategoryScore(
                name="news", achieved=news, required=policy.required_news,
                passed=news >= policy.required_news,
            ),
            personal=CategoryScore(
                name="personal", achieved=personal, required=policy.required_personal,
                passed=personal >= policy.required_personal,
            ),
            memes=CategoryScore(
                name="memes", achieved=memes, required=policy.required_memes,
                passed=memes >= policy.required_memes,
            ),
            capsule=CategoryScore(
                name="capsule", achieved=capsules, required=policy.required_capsule,
                passed=capsule_present,
            ),
            tags=CategoryScore(
                name="tags", achieved=tags_passing, required=len(items),
                passed=tags_passing == len(items),
            ),
            personal_explanations=CategoryScore(
                name="personal_explanations",
                achieved=explanations.valid_personal,
                required=explanations.total_personal,
                passed=explanations.valid_personal == explanations.total_personal,
            ),
            meme_explanations=CategoryScore(
                name="meme_explanations",
                achieved=explanations.valid_memes,
                required=explanations.total_memes,
                passed=explanations.valid_memes == explanations.total_memes,
            ),
            tag_checks=tag_checks,
            explanation_checks=explanations.details,
            extra_files=extra,
            missing_files=missing,
            achieved=achieved,
            required=required,
            percentage=completion_percentage(achieved, required),
        )

        logger.info(
            "Archive scored: %d/%d (%d%%), %d extra file(s), %d missing file(s)",
            achieved, required, report.percentage, len(extra), len(missing)
        )
        result.update(percentage=report.percentage)

    return report
