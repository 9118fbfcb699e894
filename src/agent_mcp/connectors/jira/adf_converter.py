"""Atlassian Document Format (ADF) <-> plain text conversion.

text_to_adf() turns plain text into a doc with one paragraph per line.
adf_to_text() flattens any ADF tree back to plain text (best-effort, lossy):
text leaves are concatenated in document order and block-level nodes end
with a line break. List markers, numbering and table cell boundaries are
not reproduced.

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ...config import DEFAULT_ADF_BLOCK_TYPES

logger = logging.getLogger("agent_mcp.jira.adf")

__all__ = [
    "ADF_VERSION",
    "BLOCK_NODE_TYPES",
    "AdfNode",
    "adf_to_text",
    "text_to_adf",
]

ADF_VERSION = 1

BLOCK_NODE_TYPES: frozenset[str] = frozenset(DEFAULT_ADF_BLOCK_TYPES)

# Decoder stack marker for the newline that closes a block node
_LINE_BREAK = object()


@dataclass(frozen=True)
class AdfNode:
    """Typed view of a single ADF node.

    A node is one of three shapes:
    - leaf: ``text`` set, no children (``type == "text"``)
    - container: ``children`` set, no text
    - opaque: neither (e.g. ``hardBreak``, ``rule``), contributes no text

    ``version`` is only set on the root ``doc`` node.
    """

    kind: str
    text: str | None = None
    children: tuple["AdfNode", ...] | None = None
    version: int | None = None
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_leaf(self) -> bool:
        return self.text is not None

    @property
    def is_container(self) -> bool:
        return self.children is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape the JIRA REST API expects."""
        data: dict[str, Any] = {}
        if self.version is not None:
            data["version"] = self.version
        data["type"] = self.kind
        if self.children is not None:
            data["content"] = [child.to_dict() for child in self.children]
        if self.text is not None:
            data["text"] = self.text
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "AdfNode":
        """Build a node from API JSON.

        Malformed input never raises: a non-dict becomes an opaque node, a
        non-string ``text`` or non-list ``content`` is dropped, and
        non-dict entries inside ``content`` become opaque nodes.
        """
        if not isinstance(data, dict):
            return cls(kind="")

        kind = data.get("type")
        text = data.get("text")
        content = data.get("content")
        version = data.get("version")
        attrs = data.get("attrs")

        children = None
        if isinstance(content, list):
            children = tuple(cls.from_dict(child) for child in content)

        return cls(
            kind=kind if isinstance(kind, str) else "",
            text=text if isinstance(text, str) else None,
            children=children,
            version=version if isinstance(version, int) else None,
            attrs=attrs if isinstance(attrs, dict) else {},
        )


def text_to_adf(text: str) -> dict[str, Any]:
    """Convert plain text to an ADF document.

    Each line (split on ``\\n``) becomes one paragraph. Empty lines become
    paragraphs with no content so blank lines survive a round trip. Lines
    are stored verbatim: no trimming and no inline markup parsing.

    Args:
        text: Plain text, possibly multi-line

    Returns:
        ADF doc dict: {"version": 1, "type": "doc", "content": [...]}

    Example:
        >>> text_to_adf("a\\n\\nb")["content"][1]
        {'type': 'paragraph', 'content': []}
    """
    paragraphs = []
    for line in text.split("\n"):
        if line:
            children = (AdfNode(kind="text", text=line),)
        else:
            children = ()
        paragraphs.append(AdfNode(kind="paragraph", children=children))

    doc = AdfNode(kind="doc", children=tuple(paragraphs), version=ADF_VERSION)
    return doc.to_dict()


def adf_to_text(
    adf: dict[str, Any] | AdfNode | None,
    block_types: Iterable[str] | None = None,
) -> str:
    """Extract plain text from an ADF document (best-effort).

    Walks the tree in document order. Text leaves are appended verbatim;
    after the children of a block-level node a newline is appended, even
    if the children produced no text. Trailing newlines are stripped from
    the result; other whitespace is left alone.

    Unknown node types are not an error: any node with ``content`` is
    walked and any node with ``text`` is emitted.

    Args:
        adf: ADF JSON dict or AdfNode (None and malformed input give "")
        block_types: Node types followed by a line break. Defaults to
            BLOCK_NODE_TYPES.

    Returns:
        Plain text with no trailing newline.

    Example:
        >>> adf_to_text(text_to_adf("Hello\\nworld"))
        'Hello\\nworld'
    """
    if adf is None:
        return ""

    blocks = BLOCK_NODE_TYPES if block_types is None else frozenset(block_types)

    # Stack frames are nodes (dict or AdfNode) or _LINE_BREAK, which is
    # popped once every child of its block has been walked.
    output: list[str] = []
    stack: list[Any] = [adf]
    while stack:
        node = stack.pop()
        if node is _LINE_BREAK:
            output.append("\n")
            continue

        kind, text, children = _node_parts(node)
        if isinstance(text, str):
            output.append(text)
        if children is not None:
            if isinstance(kind, str) and kind in blocks:
                stack.append(_LINE_BREAK)
            stack.extend(reversed(children))

    return "".join(output).rstrip("\n")


def _node_parts(node: Any) -> tuple[Any, Any, Sequence[Any] | None]:
    """Return (type, text, children) of a dict or AdfNode.

    children is None unless the node carries a content list. Malformed
    nodes give (None, None, None).
    """
    if isinstance(node, AdfNode):
        return node.kind, node.text, node.children
    if not isinstance(node, dict):
        logger.debug("adf_node_not_object", extra={"node": str(node)[:100]})
        return None, None, None

    content = node.get("content")
    return node.get("type"), node.get("text"), content if isinstance(content, list) else None
