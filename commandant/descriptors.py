"""
Commandant argument descriptors: declarative, cursor-based token resolution.

What this module provides
- Step: one position of a descriptor (ordered alternative parsers + required flag).
- Descriptor: an immutable, reusable ordered list of steps plus a default token
  sequence; compile() turns tokens into a tuple of Slots, one per step.
- resolve(tokens, steps): the engine behind compile().

Algorithm
Two cursors advance independently: the step cursor and the token cursor.

    step = token = 0
    while both cursors are in range:
        offer tokens[token] to each parser of steps[step], in order
        • first match  → fill slot[step], advance both cursors
        • no match, required step → stop (this and later slots stay empty)
        • no match, optional step → advance the step cursor only, so the same
          token is offered to the next step

Running out of tokens or steps is not an error: unreached slots stay empty.
There is no exception path for mismatches; callers check the slots they need,
in particular the ones declared required.

Example
    >>> size = Choice("small", "large")
    >>> descriptor = (
    ...     Descriptor(["5", "large"])
    ...         .then(Converter(int), required=True)    # amount is required
    ...         .then(Choice("red", "blue"))            # color is optional
    ...         .then(size, required=True)              # size shifts left if color is absent
    ... )
    >>> descriptor.compile()
    (Slot(5), Slot(), Slot('large'))
"""
from collections.abc import Iterable
from typing import NamedTuple, final

from .parsers import alternatives
from .slots import nones
from .utils import Unset, coalesce, mirror


class Step(NamedTuple):
    """
    One resolution position: ordered alternative parsers and the cutoff flag.
    """
    parsers: tuple
    required: bool = False


def _sanitize_tokens(tokens, caller, /):
    """
    Internal: snapshot an iterable of strings into a tuple (strings themselves are rejected).
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError(f"{caller} tokens must be an iterable of strings")
    tokens = tuple(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{caller} tokens must be an iterable of strings")
    return tokens


def _sanitize_steps(steps, caller, /):
    """
    Internal: snapshot steps, normalizing each one's parsers through alternatives().
    """
    sanitized = []
    for step in steps:
        if not isinstance(step, Step):
            raise TypeError(f"{caller} steps must be an iterable of steps")
        sanitized.append(Step(alternatives(step.parsers), bool(step.required)))
    return tuple(sanitized)


def resolve(tokens, steps, /):
    """
    Resolve tokens against steps; return one Slot per step.

    Parameters
    - tokens: Iterable[str]
      input tokens; snapshotted, never mutated.
    - steps: Iterable[Step]
      resolution schedule; each step's parsers must already expose parse().

    Returns
    - tuple[Slot, ...] with exactly len(steps) fresh slots.

    Notes
    - at most min(len(tokens), len(steps)) tokens are consumed.
    """
    tokens = _sanitize_tokens(tokens, "resolve()")
    steps = _sanitize_steps(steps, "resolve()")
    slots = nones(len(steps))

    step = index = 0
    while index < len(tokens) and step < len(steps):
        token = tokens[index]
        parsers, required = steps[step]
        for candidate in parsers:
            if slots[step].set(candidate.parse(token)):
                index += 1
                break
        else:
            # required miss cuts the whole remaining resolution
            if required:
                break
        step += 1

    return slots


@final
class Descriptor:
    """
    Immutable description of a resolution schedule.

    Lifecycle
    - built incrementally: then()/then_if() return a new descriptor whose arity
      grew by one; the receiver is left untouched, so partial descriptors can be
      shared and extended independently.
    - compiled zero or more times: each compile() runs on a private snapshot of
      the tokens and returns fresh slots; nothing is shared between runs.
    """
    __slots__ = ("_tokens", "_steps")

    tokens = mirror("tokens")
    steps = mirror("steps")

    def __init__(self, tokens=(), /, steps=()):
        self._tokens = _sanitize_tokens(tokens, "descriptor")
        self._steps = _sanitize_steps(steps, "descriptor")

    @property
    def arity(self):
        return len(self._steps)

    def then(self, parsers, /, required=False):
        """
        Append a step.

        Parameters
        - parsers: parser | Iterable[parser]
          one parser, or ordered alternatives tried first-to-last.
        - required: bool
          when no parser matches at this step, stop the whole resolution.

        Returns
        - a new Descriptor with one more step.
        """
        return Descriptor(self._tokens, self._steps + (Step(alternatives(parsers), bool(required)),))

    def then_if(self, condition, parsers, /, required=False):
        """
        Append a step only when condition holds.

        When the condition is false a placeholder step is appended instead (no
        parsers, optional), so the output arity is the same either way and the
        placeholder slot simply stays empty without consuming a token.
        """
        parsers = alternatives(parsers)
        if condition:
            return Descriptor(self._tokens, self._steps + (Step(parsers, bool(required)),))
        return Descriptor(self._tokens, self._steps + (Step((), False),))

    def compile(self, tokens=Unset, /):
        """
        Resolve tokens (defaults to the tokens captured at construction).

        Returns
        - tuple[Slot, ...] index-aligned with the steps.
        """
        return resolve(coalesce(tokens, self._tokens), self._steps)

    def __len__(self):
        return len(self._steps)

    def __repr__(self):
        return f"descriptor(tokens={self._tokens!r}, arity={self.arity!r})"

    def __rich_repr__(self):
        yield "tokens", self._tokens
        yield "steps", self._steps


__all__ = (
    "Step",
    "Descriptor",
    "resolve",
)
