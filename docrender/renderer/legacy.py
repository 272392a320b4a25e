"""Allow-list sanitizer for ``legacyHtml`` blocks.

Templates migrated from the previous engine keep their original markup in a
``legacyHtml`` node until they are upgraded (see
:mod:`docrender.importer`).  That markup is user-authored, so it is reduced
to a small set of formatting tags before it reaches the output.
"""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

ALLOWED_TAGS: frozenset[str] = frozenset({
    "p", "h1", "h2", "h3", "strong", "em", "u", "a", "ul", "ol", "li",
    "table", "thead", "tbody", "tr", "td", "th", "hr", "br", "span", "div",
})

# Removed together with everything inside them.
DROPPED_TAGS: tuple[str, ...] = (
    "script", "style", "noscript", "template", "iframe", "object", "embed",
)

ALLOWED_LINK_PROTOCOLS: tuple[str, ...] = ("https:", "http:", "mailto:")


def sanitize_legacy_html(html: str) -> str:
    """Return *html* reduced to :data:`ALLOWED_TAGS` with no attributes.

    Disallowed tags are unwrapped so their text survives; the only attribute
    kept is ``href`` on links whose scheme is in
    :data:`ALLOWED_LINK_PROTOCOLS`.
    """
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "html.parser")

    # Comments, doctypes, CDATA and processing instructions.
    for special in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        special.extract()
    for tag in soup.find_all(list(DROPPED_TAGS)):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        href = tag.get("href") if tag.name == "a" else None
        tag.attrs = {}
        if isinstance(href, str) and href.strip().lower().startswith(ALLOWED_LINK_PROTOCOLS):
            tag["href"] = href.strip()

    return str(soup)
