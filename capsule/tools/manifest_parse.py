"""
Manifest parsing: pipe-delimited lines into archive items or errors.

Parsing never raises. Every non-blank, non-comment line produces either an
ArchiveItem or a ValidationError, and both lists keep manifest order.
"""
import logging
from typing import Iterator, Optional, Union

from capsule.models.archive_item import ArchiveItem, TypeCategory
from capsule.models.manifest import ManifestLine, ManifestParseResult
from capsule.models.validation_error import ProblematicPart, ValidationError
from capsule.tools.date_check import is_valid_date
from capsule.tools.observer import EngineObserver, observe
from capsule.tools.sanitize import sanitize_filename, sanitize_text
from capsule.tools.schema import (
    MIN_FIELD_COUNT,
    FileClass,
    SchemaVariant,
    best_guess_schema,
    resolve_schema,
    variants_for,
)


logger = logging.getLogger(__name__)

DELIMITER_HINT = "field1 | field2 | field3 (spaces around '|')"


def iter_manifest_lines(text: str) -> Iterator[ManifestLine]:
    """Yield content lines, numbered by their position in the original text."""
    for index, raw in enumerate(text.split("\n")):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield ManifestLine(line_number=index + 1, raw_text=line)


def parse_manifest(
    text: str,
    observer: Optional[EngineObserver] = None
) -> ManifestParseResult:
    """
    Parse manifest text into items and structured errors.

    Args:
        text: Full manifest contents
        observer: Optional operation observer

    Returns:
        ManifestParseResult with items and errors in line order
    """
    if not isinstance(text, str):
        text = ""

    with observe(observer, "parse_manifest", text_length=len(text)) as result:
        items: list[ArchiveItem] = []
        errors: list[ValidationError] = []

        for line in iter_manifest_lines(text):
            parsed = parse_line(line)
            if isinstance(parsed, ArchiveItem):
                items.append(parsed)
            else:
                errors.append(parsed)

        logger.info(
            "Manifest parsed: %d valid item(s), %d error(s)",
            len(items), len(errors)
        )
        result.update(items=len(items), errors=len(errors))

    return ManifestParseResult(items=items, errors=errors)


def parse_line(line: ManifestLine) -> Union[ArchiveItem, ValidationError]:
    """Resolve the layout of one manifest line and build its item or error."""
    parts = line.fields

    if has_delimiter_mismatch(line.raw_text, parts):
        return _delimiter_error(line, parts)

    filename = parts[0]
    type_value = sanitize_text(parts[1]) if len(parts) > 1 else ""

    if len(parts) < MIN_FIELD_COUNT:
        guess = best_guess_schema(filename, type_value, len(parts))
        return ValidationError(
            line_number=line.line_number,
            raw_line=line.raw_text,
            message=(
                f"Insufficient fields: found {len(parts)}, "
                f"at least {MIN_FIELD_COUNT} required"
            ),
            expected_format_hint=guess.example,
            kind="insufficient_fields",
            problematic_parts=diagnose_fields(parts, guess),
        )

    variant = resolve_schema(filename, type_value, len(parts))
    if variant is None:
        return _field_count_error(line, parts, type_value)

    values, problems = check_fields(parts, variant)
    if problems:
        return ValidationError(
            line_number=line.line_number,
            raw_line=line.raw_text,
            message=(
                f"Invalid {', '.join(problems)}; "
                f"expected: {variant.layout}"
            ),
            expected_format_hint=variant.example,
            kind="format",
            problematic_parts=diagnose_fields(parts, variant),
        )

    return ArchiveItem(
        filename=values["filename"],
        type=values["type"],
        title=values.get("title", ""),
        description=values.get("description", ""),
        date=values["date"],
        tags=values.get("tags", []),
        author=values.get("author", ""),
    )


def has_delimiter_mismatch(raw_line: str, parts: list[str]) -> bool:
    """
    Detect pipes whose spacing makes the field split ambiguous.

    Lines that consistently use ' | ' pass untouched. Otherwise every pipe
    is rewritten as ' | ' and the line split again; a different field count
    means the separators cannot be trusted.
    """
    if raw_line.count("|") == 0 or len(parts) <= 1:
        return False
    if "| " in raw_line and " |" in raw_line:
        return False

    corrected = raw_line.replace("|", " | ")
    corrected_parts = [part.strip() for part in corrected.split("|")]
    return len(corrected_parts) != len(parts)


def split_tags(raw: str) -> list[str]:
    """Comma-separated tags, trimmed and sanitized, blanks dropped."""
    tags = []
    for tag in raw.split(","):
        tag = sanitize_text(tag.strip())
        if tag:
            tags.append(tag)
    return tags


def check_fields(
    parts: list[str],
    variant: SchemaVariant
) -> tuple[dict, list[str]]:
    """
    Validate the supplied fields positionally against a variant.

    Returns:
        (cleaned values keyed by field name, names of failing fields)
    """
    values: dict = {}
    problems: list[str] = []

    for index, name in enumerate(variant.fields):
        if index >= len(parts):
            problems.append(name)
            continue
        value, ok = _check_field(name, parts[index], variant)
        values[name] = value
        if not ok:
            problems.append(name)

    return values, problems


def diagnose_fields(
    parts: list[str],
    variant: SchemaVariant,
    mark_all: bool = False
) -> list[ProblematicPart]:
    """
    Per-field breakdown of an offending line.

    Field names come from ``variant``. Fields beyond a fixed-size layout
    are problematic; fields beyond an open-ended one are not. When fewer
    fields were supplied than the layout expects, the missing ones are
    appended as synthetic entries.
    """
    diagnostics = []

    for index, raw in enumerate(parts):
        name = variant.field_name(index)
        within = index < variant.field_count
        if mark_all:
            problematic = True
        elif within:
            problematic = not _check_field(name, raw, variant)[1]
        else:
            problematic = not variant.open_ended

        diagnostics.append(ProblematicPart(
            index=index,
            raw_text=raw,
            field_name=name,
            is_empty=raw == "",
            is_problematic=problematic,
            is_within_expected_count=within,
        ))

    if not mark_all:
        for index in range(len(parts), variant.field_count):
            diagnostics.append(ProblematicPart(
                index=index,
                raw_text="",
                field_name=variant.fields[index],
                is_empty=True,
                is_problematic=True,
                is_within_expected_count=True,
                is_missing=True,
            ))

    return diagnostics


def _check_field(name: str, raw: str, variant: SchemaVariant) -> tuple:
    """Clean one field value and report whether it satisfies the variant."""
    if name == "filename":
        value = sanitize_filename(raw)
        return value, bool(value)
    if name == "date":
        value = sanitize_text(raw)
        return value, is_valid_date(value)
    if name == "tags":
        # An empty tag list is left for the completion scorer to judge
        return split_tags(raw), True

    value = sanitize_text(raw)
    if name in variant.required:
        return value, bool(value)
    return value, True


def _delimiter_error(line: ManifestLine, parts: list[str]) -> ValidationError:
    type_value = sanitize_text(parts[1]) if len(parts) > 1 else ""
    guess = best_guess_schema(parts[0], type_value, len(parts))
    return ValidationError(
        line_number=line.line_number,
        raw_line=line.raw_text,
        message=f"Malformed separators; use the format: {DELIMITER_HINT}",
        expected_format_hint=guess.example,
        kind="delimiter",
        problematic_parts=diagnose_fields(parts, guess, mark_all=True),
    )


def _field_count_error(
    line: ManifestLine,
    parts: list[str],
    type_value: str
) -> ValidationError:
    filename = parts[0]
    file_class = FileClass.from_filename(filename)
    category = TypeCategory.from_type(type_value)
    variants = variants_for(file_class, category)
    guess = best_guess_schema(filename, type_value, len(parts))

    subject = "PDF item" if file_class is FileClass.PDF else "item"
    if category is not TypeCategory.GENERIC:
        subject += f" of type {category.value}"

    if variants:
        layouts = " or ".join(v.layout for v in variants)
        message = (
            f"Unexpected number of fields ({len(parts)}) for {subject}; "
            f"expected: {layouts}"
        )
        hint = " or ".join(v.example for v in variants)
    else:
        message = (
            f"No layout accepts a {subject}; "
            f"expected a non-PDF file: {guess.layout}"
        )
        hint = guess.example

    return ValidationError(
        line_number=line.line_number,
        raw_line=line.raw_text,
        message=message,
        expected_format_hint=hint,
        kind="format",
        problematic_parts=diagnose_fields(parts, guess),
    )
