"""
Open Graph metadata extraction.

Turns raw HTML into an ``OgpRecord``. The rules, applied in order:

1. Every ``<meta property="og:...">`` for title, description, image, url and
   site_name is read in document order; a later duplicate overwrites an
   earlier one.
2. A field still absent takes ``<meta name="og:...">`` if the page used the
   wrong attribute.
3. A missing title falls back to the ``<title>`` text, a missing description
   to ``<meta name="description">``. Image, url and site_name have no fallback.

An og tag whose ``content`` is missing or the empty string is ignored, so the
fallbacks still apply. Non-empty content is kept verbatim.

Extraction is pure and never raises: if the HTML parser itself fails the
module falls back to a regex scan that applies the same rules.
"""

import re
from html import unescape

import structlog
from bs4 import BeautifulSoup

from linkbox_ogp.models.ogp import OgpRecord

logger = structlog.get_logger(__name__)

# og property -> OgpRecord field name
OG_PROPERTIES = {
    "og:title": "title",
    "og:description": "description",
    "og:image": "image_url",
    "og:url": "canonical_url",
    "og:site_name": "site_name",
}

_META_TAG_RE = re.compile(r"<meta\b([^>]*)>", re.IGNORECASE)
_ATTR_RE = re.compile(
    r"""([^\s=/>"']+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+))""",
    re.IGNORECASE,
)
_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)


def extract_ogp(html: str) -> OgpRecord:
    """
    Extract Open Graph metadata from an HTML document.

    Args:
        html: Raw HTML text (may be malformed or empty)

    Returns:
        OgpRecord with whichever fields the page provides
    """
    if not isinstance(html, str) or not html:
        return OgpRecord()

    try:
        fields = _extract_with_soup(html)
    except Exception as e:
        logger.debug("ogp_parse_error", error=str(e))
        fields = _extract_with_regex(html)

    return OgpRecord(**fields)


def _normalize_key(value: object) -> str:
    if isinstance(value, list):
        value = " ".join(value)
    return str(value).strip().lower() if value is not None else ""


def _normalize_content(value: object) -> str | None:
    if isinstance(value, list):
        value = " ".join(value)
    if value is None or value == "":
        return None
    return str(value)


def _apply_meta(
    metas: list[tuple[str, str, str | None]],
) -> tuple[dict[str, str | None], str | None]:
    """
    Apply the og and description rules to ``(property, name, content)`` triples.

    Returns the og fields and the ``<meta name="description">`` content.
    """
    by_property: dict[str, str | None] = {}
    by_name: dict[str, str | None] = {}
    description: str | None = None
    seen_description = False

    for prop, name, content in metas:
        if name == "description" and not seen_description:
            description = content
            seen_description = True
        if content is None:
            continue
        if prop in OG_PROPERTIES:
            by_property[OG_PROPERTIES[prop]] = content
        if name in OG_PROPERTIES:
            by_name[OG_PROPERTIES[name]] = content

    fields: dict[str, str | None] = dict.fromkeys(OG_PROPERTIES.values())
    for field, content in by_name.items():
        fields[field] = content
    fields.update(by_property)
    return fields, description


def _extract_with_soup(html: str) -> dict[str, str | None]:
    soup = BeautifulSoup(html, "html.parser")

    metas = [
        (
            _normalize_key(tag.get("property")),
            _normalize_key(tag.get("name")),
            _normalize_content(tag.get("content")),
        )
        for tag in soup.find_all("meta")
    ]
    fields, description = _apply_meta(metas)

    if fields["title"] is None:
        title_tag = soup.find("title")
        if title_tag is not None:
            fields["title"] = title_tag.get_text().strip()

    if fields["description"] is None:
        fields["description"] = description

    return fields


def _extract_with_regex(html: str) -> dict[str, str | None]:
    metas: list[tuple[str, str, str | None]] = []
    for match in _META_TAG_RE.finditer(html):
        attrs: dict[str, str] = {}
        for attr in _ATTR_RE.finditer(match.group(1)):
            value = next((v for v in attr.group(2, 3, 4) if v is not None), "")
            attrs.setdefault(attr.group(1).lower(), unescape(value))
        metas.append(
            (
                _normalize_key(attrs.get("property")),
                _normalize_key(attrs.get("name")),
                _normalize_content(attrs.get("content")),
            )
        )
    fields, description = _apply_meta(metas)

    if fields["title"] is None:
        title_match = _TITLE_RE.search(html)
        if title_match:
            fields["title"] = unescape(title_match.group(1)).strip()

    if fields["description"] is None:
        fields["description"] = description

    return fields
