"""
Output formatting for metric records.
"""

import csv
import io
import json
import logging
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

LABELS = {
    "published": "Published",
    "paths": "Paths",
    "stylesheets": "Style Sheets",
    "styleElements": "Style Elements",
    "size": "Size",
    "dataUriSize": "Data URI Size",
    "ratioOfDataUriSize": "Ratio of Data URI Size",
    "gzippedSize": "Gzipped Size",
    "rules": "Rules",
    "selectors": "Selectors",
    "simplicity": "Simplicity",
    "mostIdentifier": "Most Identifier",
    "mostIdentifierSelector": "Most Identifier Selector",
    "lowestCohesion": "Lowest Cohesion",
    "lowestCohesionSelector": "Lowest Cohesion Selector",
    "totalUniqueFontSizes": "Total Unique Font Sizes",
    "uniqueFontSizes": "Unique Font Sizes",
    "totalUniqueFontFamilies": "Total Unique Font Families",
    "uniqueFontFamilies": "Unique Font Families",
    "totalUniqueColors": "Total Unique Colors",
    "uniqueColors": "Unique Colors",
    "idSelectors": "ID Selectors",
    "universalSelectors": "Universal Selectors",
    "unqualifiedAttributeSelectors": "Unqualified Attribute Selectors",
    "javascriptSpecificSelectors": "JavaScript Specific Selectors",
    "userSpecifiedSelectors": "User Specified Selectors",
    "importantKeywords": "Important Keywords",
    "floatProperties": "Float Properties",
    "propertiesCount": "Properties Count",
    "mediaQueries": "Media Queries",
}

BYTE_KEYS = ("size", "gzippedSize", "dataUriSize")
PERCENT_KEYS = ("simplicity", "ratioOfDataUriSize")
HIDDEN_KEYS = ("published", "paths")


def format_bytes(size: float) -> str:
    """
    Format a byte count for humans.

    >>> format_bytes(512)
    '512B'
    >>> format_bytes(2048)
    '2.0kB'
    """
    if size < 1024:
        return f"{int(size)}B"
    for unit in ("kB", "MB", "GB"):
        size /= 1024.0
        if size < 1024 or unit == "GB":
            return f"{size:.1f}{unit}"
    return f"{size:.1f}GB"


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def prettify(record: Dict[str, Any]) -> List[Tuple[str, str]]:
    """
    Convert a record into (label, text) rows for display.

    ``published`` and ``paths`` are omitted; empty lists read ``N/A``.
    """
    rows = []
    for key, value in record.items():
        if key in HIDDEN_KEYS:
            continue
        label = LABELS.get(key, key)
        if key == "propertiesCount":
            text = "\n".join(f"{item['property']}: {item['count']}" for item in value)
        elif key in BYTE_KEYS:
            text = format_bytes(value)
        elif key in PERCENT_KEYS:
            text = format_percent(value)
        elif isinstance(value, list):
            text = "\n".join(str(item) for item in value)
        else:
            text = str(value)
        rows.append((label, text or "N/A"))
    return rows


def to_json(record: Dict[str, Any]) -> str:
    return json.dumps(record, indent=2)


def to_csv(record: Dict[str, Any]) -> str:
    """
    Render a record as one CSV header row and one value row.

    Lists are joined with spaces; property counts read ``property:count``.
    """
    values = []
    for key, value in record.items():
        if key == "propertiesCount":
            value = " ".join(f"{item['property']}:{item['count']}" for item in value)
        elif isinstance(value, list):
            value = " ".join(str(item) for item in value)
        values.append(value)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(list(record.keys()))
    writer.writerow(values)
    return buffer.getvalue()


def to_table(record: Dict[str, Any]) -> str:
    """Render a record as a two-column plain text table."""
    rows = prettify(record)
    if not rows:
        return ""

    width = max(len(label) for label, _ in rows)
    separator = "-" * (width + 2) + "+" + "-" * 40
    lines = [separator]
    for label, text in rows:
        text_lines = text.split("\n")
        lines.append(f" {label.ljust(width)} | {text_lines[0]}")
        for extra in text_lines[1:]:
            lines.append(f" {' ' * width} | {extra}")
        lines.append(separator)
    return "\n".join(lines)


FORMATTERS = {
    "json": to_json,
    "csv": to_csv,
    "table": to_table,
}


def render(record: Dict[str, Any], output_format: str = "table") -> str:
    """
    Render a record in the requested format.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        formatter = FORMATTERS[output_format]
    except KeyError:
        raise ValueError(f"Unknown output format: {output_format}") from None
    logger.debug(f"Rendering record as {output_format}")
    return formatter(record)
