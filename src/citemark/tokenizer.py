"""Block token tree with raw source spans.

Wraps markdown-it-py. Every block token records the exact source lines it
covers, so concatenating ``raw`` over a depth-first walk of the tree
reproduces the original document byte for byte. Container blocks (lists,
list items, blockquotes) keep only the lines before their first child; the
children carry the rest. Trailing blank lines belong to the preceding block.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

_CONTAINER_TYPES = frozenset({"bullet_list", "ordered_list", "list_item", "blockquote"})
_NEWLINE_RE = re.compile(r"\r\n?|\n")

_md = MarkdownIt("commonmark").enable(["table", "strikethrough"])


@dataclass(frozen=True)
class Token:
    type: str  # markdown-it node type: "heading", "paragraph", "fence", ...
    raw: str
    text: str = ""  # Inline source for headings
    level: int | None = None  # Heading level (1-6) for headings
    children: tuple[Token, ...] = field(default=())


@dataclass(frozen=True)
class FlatToken:
    token: Token
    depth: int  # Nesting depth in the original tree (0 = top level)


def split_lines(content: str) -> list[str]:
    """Split keeping line endings, matching markdown-it line maps.

    markdown-it treats ``\\r\\n``, a lone ``\\r`` and ``\\n`` alike as one line break.
    """
    lines: list[str] = []
    start = 0
    for match in _NEWLINE_RE.finditer(content):
        lines.append(content[start : match.end()])
        start = match.end()
    if start < len(content):
        lines.append(content[start:])
    return lines


def fenced_line_indexes(lines: list[str]) -> set[int]:
    """Return 0-based indexes of lines inside fenced code blocks, fences included."""
    fenced: set[int] = set()
    in_code_block = False
    fence: str | None = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            current_fence = stripped[:3]
            fenced.add(index)
            if not in_code_block:
                in_code_block = True
                fence = current_fence
            elif current_fence == fence:
                in_code_block = False
                fence = None
            continue

        if in_code_block:
            fenced.add(index)

    return fenced


def tokenize(content: str) -> list[Token]:
    """Tokenize markdown into a tree of block tokens."""
    root = SyntaxTreeNode(_md.parse(content))
    lines = split_lines(content)
    return _build(_block_children(root), lines, 0, len(lines))


def flatten_tokens(tokens: list[Token] | tuple[Token, ...]) -> list[FlatToken]:
    """Depth-first flatten: each token precedes its children, then its next sibling."""
    flat: list[FlatToken] = []
    stack: list[tuple[Token, int]] = [(token, 0) for token in reversed(tokens)]
    while stack:
        token, depth = stack.pop()
        flat.append(FlatToken(token=token, depth=depth))
        for child in reversed(token.children):
            stack.append((child, depth + 1))
    return flat


def _block_children(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    return [child for child in node.children if child.map is not None and child.type != "inline"]


def _build(
    nodes: list[SyntaxTreeNode],
    lines: list[str],
    start: int,
    end: int,
) -> list[Token]:
    """Build tokens for sibling ``nodes`` covering ``lines[start:end]``."""
    tokens: list[Token] = []
    for index, node in enumerate(nodes):
        node_start = start if index == 0 else node.map[0]
        node_end = nodes[index + 1].map[0] if index + 1 < len(nodes) else end

        children: tuple[Token, ...] = ()
        raw_end = node_end
        if node.type in _CONTAINER_TYPES:
            block_children = _block_children(node)
            if block_children:
                raw_end = block_children[0].map[0]
                children = tuple(_build(block_children, lines, raw_end, node_end))

        text = ""
        level = None
        if node.type == "heading":
            level = int(node.tag[1])
            inline = node.children[0] if node.children else None
            text = inline.content if inline is not None else ""

        tokens.append(
            Token(
                type=node.type,
                raw="".join(lines[node_start:raw_end]),
                text=text,
                level=level,
                children=children,
            )
        )
    return tokens
