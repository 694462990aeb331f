"""Turn XML comment markup into plain display text."""

import html
import logging
import re
import textwrap
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

logger = logging.getLogger(__name__)

_CREF_PREFIX = re.compile(r"^[A-Z]:")
_TAG = re.compile(r"</?[A-Za-z][^<>]*/?>")
_BLANK_LINES = re.compile(r"\n{3,}")


def humanize(text: str, cref_style: str = "full") -> str:
    """Convert raw comment text (inner XML of a comment element) to plain text.

    ``cref_style`` controls how ``<see cref="..."/>`` references render:
    ``"full"`` keeps the qualified name, ``"short"`` keeps the last segment.
    Text that is not well-formed markup is stripped of anything tag-like
    instead of failing.
    """
    text = _normalize_indentation(text)
    try:
        root = ET.fromstring(f"<root>{text}</root>")
    except ET.ParseError:
        logger.debug("Malformed comment markup, stripping tags: %r", text)
        return _tidy(html.unescape(_TAG.sub("", text)))
    return _tidy(_render_children(root, cref_style))


def humanize_element(element: ET.Element, cref_style: str = "full") -> str:
    """Humanize the content of a parsed comment element such as ``<summary>``."""
    return humanize(_inner_xml(element), cref_style)


def _inner_xml(element: ET.Element) -> str:
    parts = [escape(element.text or "")]
    for child in element:
        parts.append(ET.tostring(child, encoding="unicode"))
    return "".join(parts)


def _normalize_indentation(text: str) -> str:
    """Remove the indentation shared by every line after the first.

    The first line is skipped when measuring because it usually continues
    the opening tag, e.g. ``<summary>First line``.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    padding = _common_leading_whitespace(lines[1:])
    if padding:
        lines = [line[len(padding):] if line.startswith(padding) else line for line in lines]

    while lines and not lines[0].strip():
        lines.pop(0)
    return "\n".join(lines).rstrip()


def _common_leading_whitespace(lines: list[str]) -> str:
    indents = [line[: len(line) - len(line.lstrip())] for line in lines if line.strip()]
    if not indents:
        return ""
    common = indents[0]
    for indent in indents[1:]:
        while not indent.startswith(common):
            common = common[:-1]
    return common


def _render_children(element: ET.Element, cref_style: str) -> str:
    parts = [element.text or ""]
    for child in element:
        parts.append(_render(child, cref_style))
        parts.append(child.tail or "")
    return "".join(parts)


def _render(element: ET.Element, cref_style: str) -> str:
    tag = element.tag
    inner = _render_children(element, cref_style)

    if tag in ("see", "seealso"):
        if inner.strip():
            return inner
        if element.get("cref"):
            return _cref_display(element.get("cref"), cref_style)
        return element.get("langword") or element.get("href") or ""
    if tag in ("paramref", "typeparamref"):
        return element.get("name") or inner
    if tag == "c":
        return f"`{inner}`"
    if tag == "code":
        code = textwrap.dedent(inner).strip("\n")
        return f"\n```\n{code}\n```\n"
    if tag == "para":
        return f"\n\n{inner.strip()}\n\n"
    if tag == "br":
        return "\n"
    return inner


def _cref_display(cref: str, cref_style: str) -> str:
    name = _CREF_PREFIX.sub("", cref)
    if cref_style == "short":
        name = name.split("(")[0]
        name = re.sub(r"\{.*\}|`+\d+", "", name)
        name = name.rsplit(".", 1)[-1]
    return name


def _tidy(text: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
