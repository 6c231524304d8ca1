r"""
Commandant argument buffer: imperative, single-token parsing over a private token list.

Overview
- Arguments owns an ordered, mutable copy of the tokens a command was invoked
  with. It is what a command executor receives, and it offers two styles:
  • imperative, one token at a time (get/shift/shift_if/pop/join), and
  • declarative, via describe() → Descriptor (see commandant.descriptors).

- Every operation comes in two flavors, delegating to the applicator in
  commandant.parsers:
  • first-match (get, shift, shift_if, pop, join) returns a value or Unset;
  • collect-all (*_any) returns one Slot per parser, filled at most at the
    first success.

Consumption rules
- shift/pop (and their *_any forms) remove the token unconditionally, whether
  or not a parser matched.
- shift_if/shift_if_any remove the first token only when a parser matched.
- get/get_any/join/join_any never consume anything.

Ownership
- the buffer is a private copy: the caller's sequence is never aliased, and a
  descriptor produced by describe() captures a snapshot, so later shifts do
  not leak into it (nor the other way around).

Quick example:
    >>> arguments = Arguments(["all", "5", "red"])
    >>> arguments.shift_if(Choice("all"))
    'all'
    >>> arguments.shift(Converter(int))
    5
    >>> str(arguments)
    '{ red }'
"""
from .descriptors import Descriptor, _sanitize_tokens
from .parsers import apply, apply_any
from .utils import Unset


class Arguments:
    """
    Mutable, exclusively-owned token buffer with parser-driven accessors.
    """
    __slots__ = ("_tokens",)

    def __init__(self, tokens=(), /):
        self._tokens = list(_sanitize_tokens(tokens, "arguments"))

    @property
    def tokens(self):
        """
        Read-only snapshot of the remaining tokens.
        """
        return tuple(self._tokens)

    def _at(self, index, /):
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("arguments index must be an integer")
        try:
            return self._tokens[index]
        except IndexError:
            return Unset

    def get(self, index, /, *parsers):
        """
        Parse the token at index; the first non-Unset result is returned.

        Out-of-range indices yield Unset. Negative indices count from the end,
        as for any Python sequence.
        """
        return apply(self._at(index), *parsers)

    def get_any(self, index, /, *parsers):
        """
        Parse the token at index, returning one slot per parser.
        """
        return apply_any(self._at(index), *parsers)

    def shift(self, *parsers):
        """
        Remove the first token and parse it (the token is consumed even on no match).
        """
        return apply(self._tokens.pop(0) if self._tokens else Unset, *parsers)

    def shift_any(self, *parsers):
        return apply_any(self._tokens.pop(0) if self._tokens else Unset, *parsers)

    def shift_if(self, *parsers):
        """
        Parse the first token and remove it only when some parser matched.
        """
        if (result := apply(self._at(0), *parsers)) is not Unset:
            del self._tokens[0]
        return result

    def shift_if_any(self, *parsers):
        slots = apply_any(self._at(0), *parsers)
        if any(slots):
            del self._tokens[0]
        return slots

    def pop(self, *parsers):
        """
        Remove the last token and parse it (the token is consumed even on no match).
        """
        return apply(self._tokens.pop() if self._tokens else Unset, *parsers)

    def pop_any(self, *parsers):
        return apply_any(self._tokens.pop() if self._tokens else Unset, *parsers)

    def join(self, *parsers, separator=""):
        """
        Join every remaining token with separator and parse the combined string.

        Nothing is consumed. An empty buffer joins to "" which is still offered
        to the parsers.
        """
        if not isinstance(separator, str):
            raise TypeError("arguments 'separator' must be a string")
        return apply(separator.join(self._tokens), *parsers)

    def join_any(self, *parsers, separator=""):
        if not isinstance(separator, str):
            raise TypeError("arguments 'separator' must be a string")
        return apply_any(separator.join(self._tokens), *parsers)

    def describe(self):
        """
        Return a Descriptor whose default tokens are a snapshot of this buffer.
        """
        return Descriptor(self._tokens)

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        return iter(tuple(self._tokens))

    def __str__(self):
        return "{ %s }" % ", ".join(self._tokens)

    def __repr__(self):
        return f"arguments(tokens={self.tokens!r})"

    def __rich_repr__(self):
        yield "tokens", self.tokens


__all__ = (
    "Arguments",
)
