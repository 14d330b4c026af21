"""Transformations between remote shapes and the records each pipeline sends."""
import html
import json
import logging
import re
from typing import Any, List, Optional

from .models import ExportRecord, ImportRow, MetafieldAssignment, Product

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

_LEADING_INT = re.compile(r"^\s*([+-]?)([0-9]+)")


# --- Catalog export ---

def to_export_record(product: Product) -> ExportRecord:
    """
    Flatten a product into the sheet row, keeping only its first variant.

    A product without variants (or whose first variant has no SKU) gets
    ``"N/A"`` as catalog number; a missing featured image also becomes ``"N/A"``.
    """
    first_variant = product.variants[0] if product.variants else None
    sku = first_variant.sku if first_variant is not None else None
    return ExportRecord(
        id=product.id,
        title=product.title,
        artist=product.vendor,
        catalog_number=sku if sku is not None else NOT_AVAILABLE,
        description=product.description,
        featured_image_url=product.featured_image_url or NOT_AVAILABLE,
    )


# --- Metafield import ---

def split_tracklist(text: Optional[str]) -> List[str]:
    """Split newline-delimited tracklist text, trimming lines and dropping blanks."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def parse_release_year(value: Any) -> str:
    """
    Parse the leading integer of ``value`` and return its decimal string.

    Mirrors a lenient integer parse: leading whitespace and a sign are accepted
    and trailing characters are ignored (``"1999 (reissue)"`` -> ``"1999"``).
    Only ASCII digits count. A value without leading digits yields ``"NaN"``,
    which the remote will reject as a ``number_integer``.
    """
    match = _LEADING_INT.match(str(value))
    if not match:
        logger.warning("⚠️ Release year %r is not numeric, sending 'NaN'", value)
        return "NaN"
    sign, digits = match.groups()
    # Stays text: cells may be longer than int() will convert
    digits = digits.lstrip("0") or "0"
    if sign == "-" and digits != "0":
        return "-" + digits
    return digits


def build_metafields(row: ImportRow) -> List[MetafieldAssignment]:
    """Collect the typed metafield assignments present in a row."""
    metafields: List[MetafieldAssignment] = []

    tracks = split_tracklist(row.tracklist)
    if tracks:
        metafields.append(MetafieldAssignment(
            key="tracklist",
            type="list.single_line_text_field",
            # List types take their value as a JSON-encoded string
            value=json.dumps(tracks, ensure_ascii=False),
        ))
    if row.format:
        metafields.append(MetafieldAssignment(key="format", type="single_line_text_field", value=row.format))
    if row.label:
        metafields.append(MetafieldAssignment(key="label", type="single_line_text_field", value=row.label))
    if row.release_year:
        metafields.append(MetafieldAssignment(
            key="release_year",
            type="number_integer",
            value=parse_release_year(row.release_year),
        ))

    return metafields


def build_description_html(row: ImportRow) -> Optional[str]:
    """
    Build the product description HTML for a row.

    An explicit ``Description`` cell is used as-is. Otherwise the release
    details and tracklist are rendered (escaped). Returns None when the row
    carries nothing to describe.
    """
    if row.description.strip():
        return row.description

    parts = []
    details = [
        ("Format", row.format),
        ("Label", row.label),
        ("Release year", row.release_year.strip()),
    ]
    for name, value in details:
        if value:
            parts.append(f"<p><strong>{name}:</strong> {html.escape(value)}</p>")

    tracks = split_tracklist(row.tracklist)
    if tracks:
        items = "".join(f"<li>{html.escape(track)}</li>" for track in tracks)
        parts.append(f"<h3>Tracklist</h3><ol>{items}</ol>")

    if not parts:
        return None
    return "\n".join(parts)
