"""
Core Utility Functions.

Text helpers shared by the tagging, filtering and collection modules.
"""

import unicodedata
from typing import Optional, Tuple


def strip_diacritics(value: str) -> str:
    """
    Remove combining marks after canonical decomposition.

    Examples:
        >>> strip_diacritics("Silicóna")
        'Silicona'
        >>> strip_diacritics("diámetro")
        'diametro'
    """
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_slug(value: Optional[str]) -> Optional[str]:
    """
    Trim and lowercase a slug.

    Returns:
        The normalized slug, or None for None/blank input
    """
    if not value:
        return None
    trimmed = value.strip().lower()
    return trimmed or None


def spanish_sort_key(value: str) -> Tuple[str, str]:
    """
    Sort key approximating Spanish collation.

    Case and accents are ignored at the primary level, and ñ sorts
    after n. Ties break on the swapped-case value, so lowercase sorts
    before uppercase and the ordering is total.

    Examples:
        >>> sorted(["ñandú", "Nube", "árbol", "oso"], key=spanish_sort_key)
        ['árbol', 'Nube', 'ñandú', 'oso']
        >>> sorted(["Silicona", "silicona"], key=spanish_sort_key)
        ['silicona', 'Silicona']
    """
    primary = strip_diacritics(value.lower().replace("ñ", "n~"))
    return primary, value.swapcase()
