# Text helpers — HTML stripping, markdown segmentation, fuzzy matching.
# Created: 2026-10-04

from __future__ import annotations

import re
from dataclasses import dataclass

_CODE_FENCE = re.compile(r"^```.*")
_LINE_BREAKS = re.compile(r"(?:\r\n|[\n\r\u2028\u2029\x0b\x0c\x85])+")

_MARKDOWN_PATTERNS = [
    re.compile(r"#+\s"),  # headings
    re.compile(r"\*\*.*?\*\*"),  # bold
    re.compile(r"\*.*?\*"),  # italic
    re.compile(r"`[^`]+`"),  # inline code
    re.compile(r"```[a-zA-Z]*[\s\S]+?```"),  # code block
    re.compile(r"-\s+"),  # unordered list
    re.compile(r"\d+\.\s+"),  # ordered list
    re.compile(r"\[.*?]\(.*?\)"),  # link
]


def html_to_plain_text(html: str) -> str:
    """Drop everything between ``<`` and ``>`` and trim the rest."""
    if "<" not in html and ">" not in html:
        return html.strip()

    out = []
    in_tag = False
    for ch in html:
        if ch == "<":
            in_tag = True
        elif ch == ">":
            in_tag = False
        elif not in_tag:
            out.append(ch)
    return "".join(out).strip()


def split_into_paragraphs(text: str) -> list[str]:
    return [p for p in _LINE_BREAKS.split(text) if p.strip()]


@dataclass(frozen=True)
class MarkdownSegment:
    is_code_block: bool
    content: str


def split_markdown_segments(text: str) -> list[MarkdownSegment]:
    """Split markdown into code blocks and prose paragraphs, in order.

    An unterminated code fence turns the remainder into a code block.
    """
    segments: list[MarkdownSegment] = []
    buffer: list[str] = []
    in_code_block = False

    for line in text.splitlines():
        if _CODE_FENCE.match(line.strip()):
            if in_code_block:
                segments.append(MarkdownSegment(True, "\n".join(buffer)))
                buffer.clear()
            elif buffer:
                segments.append(MarkdownSegment(False, "\n".join(buffer)))
                buffer.clear()
            in_code_block = not in_code_block
        else:
            buffer.append(line)

    if buffer:
        segments.append(MarkdownSegment(in_code_block, "\n".join(buffer)))

    result: list[MarkdownSegment] = []
    for segment in segments:
        if segment.is_code_block:
            result.append(segment)
        else:
            result.extend(MarkdownSegment(False, p) for p in split_into_paragraphs(segment.content))
    return result


def is_markdown(text: str) -> bool:
    return any(p.search(text) for p in _MARKDOWN_PATTERNS)


def levenshtein(a: str, b: str) -> int:
    """Edit distance using a single row of costs."""
    costs = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        previous = i - 1
        costs[0] = i
        for j in range(1, len(b) + 1):
            current = costs[j]
            cost = 0 if a[i - 1] == b[j - 1] else 1
            costs[j] = min(costs[j] + 1, costs[j - 1] + 1, previous + cost)
            previous = current
    return costs[len(b)]


def match_accuracy(text: str, other: str) -> float:
    """Case-insensitive similarity of two strings as a percentage."""
    max_len = max(len(text), len(other))
    if max_len == 0:
        return 100.0
    distance = levenshtein(text.lower(), other.lower())
    return (max_len - distance) / max_len * 100
