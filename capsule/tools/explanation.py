"""
Explanation files for ЛИЧНОЕ and МЕМ items: discovery and word counts.

An item ``05_мем.png`` is explained by a companion text file such as
``05_мем_объяснение.txt``. The lookup runs in three tiers and the first hit
wins:

1. exact ``<base><suffix>`` names,
2. the same names built from shorter ``_``-separated prefixes of the base,
3. any explanation-named file whose stem overlaps the base name.
"""
import asyncio
import logging
import re
from typing import Iterable, Optional

from capsule.config import DEFAULT_POLICY, EXPLANATION_SUFFIXES, ScoringPolicy
from capsule.models.archive_item import ArchiveItem, TypeCategory
from capsule.models.completion import ExplanationCheck, ExplanationSummary
from capsule.tools.archive_storage import ArchiveStorage
from capsule.tools.observer import EngineObserver, observe


logger = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.[^/.]+$")
_WHITESPACE = re.compile(r"\s+")


def strip_extension(filename: str) -> str:
    return _EXTENSION.sub("", filename)


def _candidate_names(base: str, suffixes: Iterable[str]) -> list[str]:
    suffixes = list(suffixes)
    names = [base + suffix for suffix in suffixes]
    # Same names with an upper-case .TXT extension
    names += [base + strip_extension(suffix) + ".TXT" for suffix in suffixes]
    return names


def locate_explanation(
    filename: str,
    file_listing: Iterable[str],
    suffixes: Iterable[str] = EXPLANATION_SUFFIXES
) -> Optional[str]:
    """
    Find the explanation file for an item.

    Args:
        filename: Item filename from the manifest
        file_listing: Every filename in the archive
        suffixes: Explanation suffixes in priority order

    Returns:
        Name of the explanation file as listed in the archive, or None
    """
    listing = list(file_listing)
    available = set(listing)
    suffixes = tuple(suffixes)
    base = strip_extension(filename)

    # Tier 1: exact, case-sensitive
    for name in _candidate_names(base, suffixes):
        if name in available:
            logger.debug("Explanation for %s found by exact name: %s", filename, name)
            return name

    # Tier 2: progressively shorter prefixes of the base name
    segments = base.split("_")
    for i in range(len(segments), 0, -1):
        partial = "_".join(segments[:i])
        for name in _candidate_names(partial, suffixes):
            if name in available:
                logger.debug("Explanation for %s found by prefix %r: %s", filename, partial, name)
                return name

    # Tier 3: archive-wide scan of explanation-named files
    base_lower = base.lower()
    lowered_suffixes = [s.lower() for s in suffixes]
    suffix_words = [strip_extension(s) for s in lowered_suffixes]
    for candidate in listing:
        candidate_lower = candidate.lower()
        if not any(candidate_lower.endswith(s) for s in lowered_suffixes):
            continue

        stem = strip_extension(candidate_lower)
        owner = stem
        for word in suffix_words:
            if owner.endswith(word):
                owner = owner[: -len(word)]
                break

        if base_lower in stem or (owner and owner in base_lower):
            logger.debug("Explanation for %s found by scan: %s", filename, candidate)
            return candidate

    logger.debug("No explanation file for %s", filename)
    return None


def count_words(text) -> int:
    """Number of whitespace-separated tokens; non-strings count as 0."""
    if not isinstance(text, str):
        return 0
    return len([word for word in _WHITESPACE.split(text.strip()) if word])


def required_words(item: ArchiveItem, policy: ScoringPolicy = DEFAULT_POLICY) -> int:
    """Word threshold for an item's explanation, 0 when none is needed."""
    category = item.type_category
    if category is TypeCategory.PERSONAL:
        return policy.personal_words
    if category is TypeCategory.MEME:
        return policy.meme_words
    return 0


async def validate_explanation_for_item(
    item: ArchiveItem,
    storage: ArchiveStorage,
    file_listing: Optional[list[str]] = None,
    policy: ScoringPolicy = DEFAULT_POLICY
) -> ExplanationCheck:
    """
    Check that an item's explanation exists and is long enough.

    Never raises: a missing or unreadable file yields a failing check with
    the reason in ``error``.
    """
    check = ExplanationCheck(
        filename=item.filename,
        type=item.upper_type,
        title=item.title or item.filename,
        required_words=required_words(item, policy),
    )

    if not item.type_category.needs_explanation:
        check.error = "Item is neither ЛИЧНОЕ nor МЕМ"
        return check

    if file_listing is None:
        file_listing = storage.list_files()

    explanation_file = locate_explanation(
        item.filename, file_listing, policy.explanation_suffixes
    )
    if explanation_file is None:
        check.error = "Explanation file not found"
        return check

    check.explanation_file = explanation_file
    try:
        text = await storage.extract_text(explanation_file)
    except Exception as e:
        logger.warning(
            "Failed to read explanation file %s for %s: %s",
            explanation_file, item.filename, e
        )
        check.error = str(e) or type(e).__name__
        return check

    check.word_count = count_words(text)
    check.passed = check.word_count >= check.required_words
    logger.debug(
        "Explanation %s: %d/%d words",
        explanation_file, check.word_count, check.required_words
    )
    return check


async def validate_explanations(
    items: list[ArchiveItem],
    storage: ArchiveStorage,
    file_listing: Optional[list[str]] = None,
    policy: ScoringPolicy = DEFAULT_POLICY,
    observer: Optional[EngineObserver] = None
) -> ExplanationSummary:
    """
    Validate explanations of every ЛИЧНОЕ and МЕМ item concurrently.

    Returns:
        ExplanationSummary with pass counts, totals and per-item details
        (details follow manifest order)
    """
    explained = [item for item in items if item.type_category.needs_explanation]

    with observe(observer, "validate_explanations", items=len(explained)) as result:
        if file_listing is None:
            file_listing = storage.list_files()

        details = await asyncio.gather(*(
            validate_explanation_for_item(item, storage, file_listing, policy)
            for item in explained
        ))

        summary = ExplanationSummary(details=list(details))
        for item, check in zip(explained, details):
            if item.is_personal():
                summary.total_personal += 1
                summary.valid_personal += int(check.passed)
            else:
                summary.total_memes += 1
                summary.valid_memes += int(check.passed)

        logger.info(
            "Explanation validation completed: personal %d/%d, memes %d/%d",
            summary.valid_personal, summary.total_personal,
            summary.valid_memes, summary.total_memes
        )
        result.update(
            valid_personal=summary.valid_personal,
            valid_memes=summary.valid_memes,
        )

    return summary
