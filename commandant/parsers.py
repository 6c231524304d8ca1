r"""
Commandant value parsers and the multi-parser applicator.

Contract
- A value parser is anything with a `parse(token)` method returning either a
  value or the Unset sentinel. Unset means “no match”: the token simply does
  not fit this parser, and the caller moves on to the next alternative. It is
  never an error.
- Any returned object other than Unset is a match, including None, 0, "" and
  False.
- Parsers must cope with the empty string (returning Unset when it does not
  apply). The engine assumes nothing about side effects, but a well-behaved
  parser returns the same result for the same token.
- A plain callable `f(token) -> value | Unset` is accepted wherever a parser
  is, and is wrapped once by parser().

Applicator
- apply(token, *parsers): first-match mode; the first non-Unset result wins.
- apply_any(token, *parsers): collect-all mode; one Slot per parser, the
  first success fills its own slot and stops the scan.

Stock parsers
- Converter(type, choices=()): wraps a converter that raises ValueError or
  TypeError on bad input (int, float, Decimal, ...).
- Choice(*choices, casefold=False): literal keywords.
- Pattern(regex, group=0): regular expression full-match.
- Boolean(): yes/no style switches.

Example
    >>> apply("42", Choice("all"), Converter(int))
    42
    >>> apply_any("all", Choice("all"), Converter(int))
    (Slot('all'), Slot())
"""
import re
from collections.abc import Iterable

from .slots import nones
from .utils import Unset


class FunctionParser:
    """
    Adapter exposing a plain callable through the parse() contract.

    The callable's return value is passed through untouched: it must return
    Unset itself to signal a non-match.
    """
    __slots__ = ("_callback",)

    def __init__(self, callback, /):
        if not callable(callback):
            raise TypeError("function-parser 'callback' must be callable")
        self._callback = callback

    @property
    def callback(self):
        return self._callback

    def parse(self, token, /):
        return self._callback(token)

    def __repr__(self):
        return f"function-parser(callback={self._callback!r})"

    def __rich_repr__(self):
        yield "callback", self._callback


def parser(x, /):
    """
    Normalize a parser-like object into something exposing parse().

    Resolution
    - object with a callable `parse` attribute (not a class) → returned as-is
    - any other callable → wrapped in FunctionParser
    - anything else → TypeError
    """
    if not isinstance(x, type) and callable(getattr(x, "parse", None)):
        return x
    if callable(x):
        return FunctionParser(x)
    raise TypeError("parser() argument must be a value parser or a callable")


def alternatives(x, /):
    """
    Normalize one parser, or an iterable of alternatives, into a tuple of parsers.
    """
    if isinstance(x, str | bytes):
        raise TypeError("alternatives() argument must be a parser or an iterable of parsers")
    if callable(x) or callable(getattr(x, "parse", None)):
        return (parser(x),)
    if isinstance(x, Iterable):
        return tuple(map(parser, x))
    raise TypeError("alternatives() argument must be a parser or an iterable of parsers")


def _check_token(token, caller):
    if token is not Unset and not isinstance(token, str):
        raise TypeError(f"{caller}() token must be a string")


def apply(token, /, *parsers):
    """
    First-match mode: try each parser in order, return the first non-Unset result.

    Returns Unset when the token is absent (Unset), when the parser list is
    empty, or when no parser matched.
    """
    _check_token(token, "apply")
    if token is Unset:
        return Unset
    for candidate in map(parser, parsers):
        if (result := candidate.parse(token)) is not Unset:
            return result
    return Unset


def apply_any(token, /, *parsers):
    """
    Collect-all mode: one slot per parser, index-aligned.

    The scan stops at the first parser that matches; later parsers are not
    attempted, so their slots stay empty even if they would have matched. An
    absent token yields all-empty slots without calling any parser.
    """
    _check_token(token, "apply_any")
    candidates = tuple(map(parser, parsers))
    slots = nones(len(candidates))
    if token is Unset:
        return slots
    for slot, candidate in zip(slots, candidates):
        if slot.set(candidate.parse(token)):
            break
    return slots


class Converter:
    """
    Parser built from a converter callable such as int or float.

    Behavior
    - empty tokens never match.
    - ValueError/TypeError raised by the converter mean “no match”.
    - when choices are given, converted values outside them do not match.
    """
    __slots__ = ("_type", "_choices")

    def __init__(self, type, /, choices=()):
        if not callable(type):
            raise TypeError("converter 'type' must be callable")
        if not isinstance(choices, Iterable) or isinstance(choices, str):
            raise TypeError("converter 'choices' must be an iterable")
        self._type = type
        self._choices = tuple(choices)

    @property
    def type(self):
        return self._type

    @property
    def choices(self):
        return self._choices

    def parse(self, token, /):
        if not token:
            return Unset
        try:
            value = self._type(token)
        except (ValueError, TypeError):
            return Unset
        if self._choices and value not in self._choices:
            return Unset
        return value

    def __repr__(self):
        return f"converter(type={self._type!r}, choices={self._choices!r})"

    def __rich_repr__(self):
        yield "type", self._type
        yield "choices", self._choices


class Choice:
    """
    Parser matching one of a fixed set of keywords.

    With casefold=True the comparison ignores case, and the declared spelling
    is returned (so "ALL" parses to "all" when "all" was declared).
    """
    __slots__ = ("_choices", "_casefold")

    def __init__(self, *choices, casefold=False):
        if not choices:
            raise TypeError("choice must specify at least one choice")
        seen = set()
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("choice 'choices' must be strings")
            elif not choice:
                raise ValueError("choice 'choices' cannot be empty-strings")
            elif (key := choice.casefold() if casefold else choice) in seen:
                raise ValueError("choice 'choices' cannot contain duplicates")
            seen.add(key)
        self._choices = choices
        self._casefold = bool(casefold)

    @property
    def choices(self):
        return self._choices

    @property
    def casefold(self):
        return self._casefold

    def parse(self, token, /):
        for choice in self._choices:
            if token == choice or self._casefold and token.casefold() == choice.casefold():
                return choice
        return Unset

    def __repr__(self):
        return f"choice(choices={self._choices!r}, casefold={self._casefold!r})"

    def __rich_repr__(self):
        yield "choices", self._choices
        yield "casefold", self._casefold


class Pattern:
    """
    Parser accepting tokens that fully match a regular expression.

    The selected group is returned; an optional group that did not take part
    in the match counts as no match.
    """
    __slots__ = ("_regex", "_group")

    def __init__(self, regex, /, group=0):
        if isinstance(regex, str):
            regex = re.compile(regex)
        elif not isinstance(regex, re.Pattern):
            raise TypeError("pattern 'regex' must be a string or a compiled pattern")
        if not isinstance(group, int | str) or isinstance(group, bool):
            raise TypeError("pattern 'group' must be an integer or a string")
        elif isinstance(group, int) and not 0 <= group <= regex.groups:
            raise ValueError("pattern 'group' must name a group of the regex")
        elif isinstance(group, str) and group not in regex.groupindex:
            raise ValueError("pattern 'group' must name a group of the regex")
        self._regex = regex
        self._group = group

    @property
    def regex(self):
        return self._regex

    @property
    def group(self):
        return self._group

    def parse(self, token, /):
        if (match := self._regex.fullmatch(token)) is None:
            return Unset
        if (value := match.group(self._group)) is None:
            return Unset
        return value

    def __repr__(self):
        return f"pattern(regex={self._regex.pattern!r}, group={self._group!r})"

    def __rich_repr__(self):
        yield "regex", self._regex.pattern
        yield "group", self._group


class Boolean:
    """
    Parser for yes/no style tokens (case-insensitive).
    """
    __slots__ = ()

    truthy = frozenset({"true", "yes", "on", "1"})
    falsy = frozenset({"false", "no", "off", "0"})

    def parse(self, token, /):
        if (token := token.casefold()) in self.truthy:
            return True
        if token in self.falsy:
            return False
        return Unset

    def __repr__(self):
        return "boolean()"


__all__ = (
    "FunctionParser",
    "parser",
    "alternatives",
    "apply",
    "apply_any",
    "Converter",
    "Choice",
    "Pattern",
    "Boolean",
)
