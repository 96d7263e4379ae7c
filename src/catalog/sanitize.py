"""
Product description sanitizer.

Descriptions are imported from the shop backend as HTML and rendered
as-is by the storefront, so they go through an allow-list first:
- allowed tags keep only their allowed attributes
- script/style/iframe-like tags are dropped with their content
- every other tag is unwrapped (its text survives)
- links keep href only for http(s), mailto or relative URLs
"""

import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, ProcessingInstruction

from catalog.models import AttributeValue
from config.constants import DEFAULT_SANITIZER_CONFIG, SanitizerConfig


_URL_IGNORED_CHARS = re.compile(r"[\x00-\x20]+")


def _is_safe_url(url: str, config: SanitizerConfig) -> bool:
    # Browsers ignore control chars and whitespace inside the scheme ("java\tscript:")
    compact = _URL_IGNORED_CHARS.sub("", url)
    if not compact:
        return False
    try:
        scheme = urlparse(compact).scheme.lower()
    except ValueError:
        # Unparseable, e.g. an unclosed IPv6 bracket
        return False
    return not scheme or scheme in config.ALLOWED_URL_SCHEMES


def sanitize_description_html(
    html: Optional[str],
    config: SanitizerConfig = DEFAULT_SANITIZER_CONFIG,
) -> Optional[str]:
    """
    Clean description HTML against the allow-list.

    Returns:
        Sanitized HTML, or None when the input is empty or nothing
        readable survives.

    Examples:
        >>> sanitize_description_html('<p class="x">Hola <b>mundo</b></p>')
        '<p>Hola <b>mundo</b></p>'
        >>> sanitize_description_html("<script>alert(1)</script>") is None
        True
    """
    if not html or not html.strip():
        return None

    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(list(config.DROP_WITH_CONTENT)):
        # Nested matches are already gone with their parent
        if not tag.decomposed:
            tag.decompose()

    for node in soup.find_all(
        string=lambda s: isinstance(s, (Comment, Declaration, Doctype, ProcessingInstruction))
    ):
        node.extract()

    for tag in soup.find_all(True):
        if tag.name not in config.ALLOWED_TAGS:
            tag.unwrap()
            continue

        allowed_attributes = config.ALLOWED_ATTRIBUTES.get(tag.name, frozenset())
        for attribute in list(tag.attrs):
            if attribute not in allowed_attributes:
                del tag[attribute]

        href = tag.get("href")
        if href is not None and not _is_safe_url(str(href), config):
            del tag["href"]

    if not soup.get_text(strip=True):
        return None

    cleaned = str(soup).strip()
    return cleaned or None


def normalize_attributes(raw: Optional[Mapping[str, Any]]) -> Dict[str, AttributeValue]:
    """
    Clean a product attribute map.

    Keys are trimmed and blank keys dropped. String values are trimmed;
    None values and strings left empty are dropped. Booleans and numbers
    pass through.
    """
    if not raw:
        return {}

    normalized: Dict[str, AttributeValue] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key.strip():
            continue
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        elif not isinstance(value, (bool, int, float)):
            value = str(value)
        normalized[key.strip()] = value
    return normalized
