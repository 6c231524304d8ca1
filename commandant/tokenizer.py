"""
Prefix-based splitting of raw input lines into a command name and its tokens.

    >>> Tokenizer("/").dissect("/hurt bob 5")
    Invocation(name='hurt', tokens=('bob', '5'), line='/hurt bob 5')

No quoting or escaping grammar: tokens are whitespace-separated words.
"""
from typing import NamedTuple


class Invocation(NamedTuple):
    name: str
    tokens: tuple[str, ...]
    line: str


class Tokenizer:
    """
    Split prefixed lines such as "!kick bob" into an Invocation.

    The prefix is mutable (see the `prefix` property); an empty prefix accepts
    every non-blank line.
    """
    __slots__ = ("_prefix",)

    def __init__(self, prefix="/"):
        self.prefix = prefix

    @property
    def prefix(self):
        return self._prefix

    @prefix.setter
    def prefix(self, prefix):
        if not isinstance(prefix, str):
            raise TypeError("tokenizer 'prefix' must be a string")
        self._prefix = prefix

    def dissect(self, line, /):
        """
        Return Invocation(name, tokens, line), or None when the line is not a command.

        None is returned for non-string or empty lines, lines blank after
        trimming, lines without the prefix, and lines with nothing after it.
        """
        if not isinstance(line, str) or not line:
            return None
        if not (trimmed := line.strip()) or not trimmed.startswith(self._prefix):
            return None
        if not (words := trimmed[len(self._prefix):].split()):
            return None
        name, *tokens = words
        return Invocation(name, tuple(tokens), line)

    def __repr__(self):
        return f"tokenizer(prefix={self._prefix!r})"

    def __rich_repr__(self):
        yield "prefix", self._prefix


__all__ = (
    "Invocation",
    "Tokenizer",
)
