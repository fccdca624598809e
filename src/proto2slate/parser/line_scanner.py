"""Line-level helpers shared by the declaration extractor."""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

# Comment styles accepted in front of services and rpc calls.
BLOCK_COMMENTS: Tuple[str, ...] = ("/*", "*")
# Enums only pick up `//` comments.
LINE_COMMENTS: Tuple[str, ...] = ("//",)


def scan_lines(text: str) -> List[str]:
    """Split proto source into lines, right-trimmed, in source order."""
    return [line.rstrip() for line in text.split("\n")]


def preceding_lines(lines: Sequence[str], index: int) -> Iterator[str]:
    """Yield the left-trimmed lines above ``index``, nearest first.

    Stops at the top of the file.
    """
    i = index - 1
    while i >= 0:
        yield lines[i].lstrip()
        i -= 1


def is_comment_line(line: str, styles: Tuple[str, ...] = BLOCK_COMMENTS) -> bool:
    return line.startswith(styles)


def strip_comment(line: str) -> str:
    """Remove comment punctuation (`/`, `*`) and spaces from both ends."""
    return line.strip().strip("*/ ")


def collect_comment(
    lines: Sequence[str],
    index: int,
    styles: Tuple[str, ...] = BLOCK_COMMENTS,
) -> List[str]:
    """Return the stripped comment lines directly above ``index``.

    Lines come back in top-to-bottom order; lines that are empty once the
    comment punctuation is removed (``/**``, ``*/``) are dropped.
    """
    pieces: List[str] = []
    for line in preceding_lines(lines, index):
        if not is_comment_line(line, styles):
            break
        text = strip_comment(line)
        if text:
            pieces.append(text)
    pieces.reverse()
    return pieces
