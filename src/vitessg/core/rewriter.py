"""Asset reference rewriting for rendered documents.

Rewrites script, stylesheet, image and font references so they point at the
flattened bundle directories. Matching is textual over the serialized
document, so font urls inside inline <style> blocks are rewritten as well.
"""

import re

import lxml.html
from lxml import etree

from vitessg.core.assets import AssetCategory
from vitessg.core.errors import FormattingError

HTML_DOCTYPE = "<!DOCTYPE html>"

# Query string or fragment trailing the extension (e.g. "?v=3", "?#iefix")
_SUFFIX = r"(?P<suffix>[?#][^\"')\s]*)?"

SCRIPT_SRC_RE = re.compile(
    r"\bsrc=(?P<quote>[\"'])(?P<path>[^\"']+?\.(?:js|mjs|cjs))" + _SUFFIX + r"(?P=quote)",
    re.IGNORECASE,
)
STYLESHEET_HREF_RE = re.compile(
    r"\bhref=(?P<quote>[\"'])(?P<path>[^\"']+?\.css)" + _SUFFIX + r"(?P=quote)",
    re.IGNORECASE,
)
IMAGE_SRC_RE = re.compile(
    r"\bsrc=(?P<quote>[\"'])(?P<path>[^\"']+?\.(?:png|jpg|jpeg|gif|svg|webp|ico))"
    + _SUFFIX
    + r"(?P=quote)",
    re.IGNORECASE,
)
FONT_URL_RE = re.compile(
    r"url\(\s*(?P<quote>[\"']?)(?P<path>[^\"')]+?\.(?:woff2|woff|ttf|otf|eot))"
    + _SUFFIX
    + r"(?P=quote)\s*\)",
    re.IGNORECASE,
)


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _attribute_replacer(attribute: str, category: AssetCategory):
    def replace(match: re.Match[str]) -> str:
        quote = match.group("quote")
        suffix = match.group("suffix") or ""
        target = f"/{category.directory}/{_basename(match.group('path'))}{suffix}"
        return f"{attribute}={quote}{target}{quote}"

    return replace


def _replace_font_url(match: re.Match[str]) -> str:
    suffix = match.group("suffix") or ""
    directory = AssetCategory.FONT.directory
    return f"url(/{directory}/{_basename(match.group('path'))}{suffix})"


def rewrite_references(html: str) -> str:
    """Point every asset reference in a document at its bundle directory.

    Already rewritten references map onto themselves, so the rewrite is
    idempotent. Query strings and fragments are kept after the file name.

    Args:
        html: Serialized document

    Returns:
        Document with rewritten asset references
    """
    html = SCRIPT_SRC_RE.sub(_attribute_replacer("src", AssetCategory.SCRIPT), html)
    html = STYLESHEET_HREF_RE.sub(
        _attribute_replacer("href", AssetCategory.STYLESHEET), html
    )
    html = IMAGE_SRC_RE.sub(_attribute_replacer("src", AssetCategory.IMAGE), html)
    return FONT_URL_RE.sub(_replace_font_url, html)


def format_document(html: str) -> str:
    """Pretty-print a document for stable, readable output.

    Line breaks are only added between block-level elements; text nodes and
    inline markup are serialized as-is, so the rendered text is unchanged.
    Must run after rewrite_references, never before.

    Raises:
        FormattingError: If the markup cannot be parsed
    """
    try:
        document = lxml.html.document_fromstring(html)
    except (etree.LxmlError, ValueError) as e:
        raise FormattingError(f"Failed to format document: {e}") from e
    return lxml.html.tostring(
        document,
        pretty_print=True,
        method="html",
        encoding="unicode",
        doctype=HTML_DOCTYPE,
    )
