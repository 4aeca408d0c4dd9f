"""
Split a corpus into tokens.

The smallest token is one extended grapheme cluster, so a base letter and its
combining marks always travel together. Configured multigraphs ("th", "qu",
"ch", ...) are emitted whole wherever the text starts with one.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

import regex

_GRAPHEME = regex.compile(r"\X")


class Tokenizer:
    """
    Lazy, restartable token stream over `text`.

    When several multigraphs match at the same position the longest wins;
    equal lengths are resolved lexicographically.

    >>> list(Tokenizer("that quack", ["th", "qu"]))
    ['th', 'a', 't', ' ', 'qu', 'a', 'c', 'k']
    """

    def __init__(self, text: str, multigraphs: Iterable[str] = ()) -> None:
        self.text = text
        self.multigraphs: Tuple[str, ...] = tuple(
            sorted({m for m in multigraphs if m}, key=lambda m: (-len(m), m))
        )

    def __iter__(self) -> Iterator[str]:
        text = self.text
        pos = 0
        while pos < len(text):
            for graph in self.multigraphs:
                if text.startswith(graph, pos):
                    yield graph
                    pos += len(graph)
                    break
            else:
                match = _GRAPHEME.match(text, pos)
                yield match.group()
                pos = match.end()


def tokenize(text: str, multigraphs: Iterable[str] = ()) -> List[str]:
    return list(Tokenizer(text, multigraphs))


__all__ = ["Tokenizer", "tokenize"]
