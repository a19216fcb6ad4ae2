"""
Variant SKU scheme.

A variant SKU is the base SKU followed by the normalized size and color,
where normalizing means trimming, dropping all whitespace and upper-casing:

    generate_variant_sku('TSH-01', 'x l', ' navy blue') == 'TSH-01XLNAVYBLUE'
"""
import re
from typing import Tuple

_WHITESPACE = re.compile(r'\s+')


def normalize_variant_part(value: str) -> str:
    return _WHITESPACE.sub('', (value or '').strip()).upper()


def variant_key(size: str, color: str) -> Tuple[str, str]:
    """Stable identity of a variant within its product."""
    return normalize_variant_part(size), normalize_variant_part(color)


def generate_variant_sku(base_sku: str, size: str, color: str) -> str:
    """Return the variant SKU, or '' when any part is blank."""
    if not (base_sku or '').strip() or not (size or '').strip() or not (color or '').strip():
        return ''
    normalized_size, normalized_color = variant_key(size, color)
    return f"{base_sku.strip()}{normalized_size}{normalized_color}"


def extract_base_sku(full_sku: str, size: str, color: str) -> str:
    """
    Inverse of generate_variant_sku: strip the size+color suffix.

    Returns full_sku unchanged when the suffix is not present or when size
    or color is blank.
    """
    if not full_sku:
        return full_sku

    suffix = ''.join(variant_key(size, color))
    if not normalize_variant_part(size) or not normalize_variant_part(color):
        return full_sku

    if full_sku.endswith(suffix):
        return full_sku[:-len(suffix)]
    return full_sku
