"""Archive structure checks and descriptive statistics over parsed items."""
from capsule.config import DEFAULT_POLICY
from capsule.models.archive_item import ArchiveItem
from capsule.models.completion import ArchiveStatistics
from capsule.models.validation_error import ProblematicPart, ValidationError
from capsule.tools.date_check import parse_manifest_date


def check_archive_structure(
    items: list[ArchiveItem],
    file_listing: list[str],
    manifest_name: str = DEFAULT_POLICY.manifest_name
) -> list[ValidationError]:
    """
    Report manifest entries missing from the archive, and a missing manifest.

    Line numbers refer to the item's position among parsed items (1-based),
    since items do not remember their manifest line.
    """
    errors = []
    present = {name.lower() for name in file_listing}

    for index, item in enumerate(items):
        if item.filename.lower() in present:
            continue
        errors.append(ValidationError(
            line_number=index + 1,
            raw_line=" | ".join([
                item.filename, item.type, item.title, item.description,
                item.date, ",".join(item.tags),
            ]),
            message=f"File {item.filename} not found in archive",
            expected_format_hint="Every manifest entry must exist in the archive",
            kind="missing_file",
            problematic_parts=[ProblematicPart(
                index=0,
                raw_text=item.filename,
                field_name="filename",
                is_problematic=True,
            )],
        ))

    if manifest_name.lower() not in present:
        errors.append(ValidationError(
            line_number=1,
            raw_line=manifest_name,
            message=f"File {manifest_name} not found in archive",
            expected_format_hint=f"{manifest_name} is required",
            kind="missing_manifest",
            problematic_parts=[ProblematicPart(
                index=0,
                raw_text=manifest_name,
                field_name="required_file",
                is_problematic=True,
            )],
        ))

    return errors


def compute_statistics(items: list[ArchiveItem]) -> ArchiveStatistics:
    """Counts per type, total tags, and the range of parseable dates."""
    stats = ArchiveStatistics(total_items=len(items))

    for item in items:
        stats.items_by_type[item.upper_type] = stats.items_by_type.get(item.upper_type, 0) + 1
        stats.tag_count += item.tag_count

        # Shape-valid but impossible dates (month 13) are skipped
        date = parse_manifest_date(item.date)
        if date is None:
            continue
        if stats.earliest_date is None or date < stats.earliest_date:
            stats.earliest_date = date
        if stats.latest_date is None or date > stats.latest_date:
            stats.latest_date = date

    return stats
