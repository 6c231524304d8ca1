"""
Single-assignment result cells.

A Slot reports the outcome of one resolution step: it starts empty and can
be filled at most once. A fixed-size tuple of slots, index-aligned with the
steps of a descriptor (or with the parsers of a collect-all application), is
the output of one resolution attempt.

Semantics
- empty vs filled is tracked with the Unset sentinel, so falsy values (0, "",
  None, False) are legitimate contents: a slot holding 0 is still filled and
  truthy.
- set() only ever fills an empty slot; later calls are ignored.
- get() raises EmptySlotError (a LookupError) on an empty slot unless a
  default is supplied.

Example
    >>> slot = Slot()
    >>> slot.set(5)
    True
    >>> slot.set(6)
    False
    >>> slot.get()
    5
"""
from typing import final

from .utils import Unset


class EmptySlotError(LookupError):
    """
    raised by Slot.get() when the slot was never filled and no default was given.
    """


@final
class Slot[_T]:
    """
    Single-assignment, readable-empty-or-filled cell.
    """
    __slots__ = ("_value",)

    def __init__(self, value=Unset, /):
        self._value = value

    @property
    def filled(self):
        return self._value is not Unset

    @property
    def value(self):
        """
        Raw content, or Unset when the slot is empty.
        """
        return self._value

    def set(self, value, /):
        """
        Fill the slot when it is empty and value is not Unset.

        Returns
        - True when this call filled the slot, False otherwise.
        """
        if self._value is not Unset or value is Unset:
            return False
        self._value = value
        return True

    def get(self, default=Unset, /):
        if self._value is not Unset:
            return self._value
        if default is not Unset:
            return default
        raise EmptySlotError("slot is empty")

    def __bool__(self):
        return self._value is not Unset

    def __eq__(self, other, /):
        if not isinstance(other, Slot):
            return NotImplemented
        return self._value is other._value or self._value == other._value

    # mutable until filled
    __hash__ = None

    def __repr__(self):
        if self._value is Unset:
            return "Slot()"
        return f"Slot({self._value!r})"

    def __rich_repr__(self):
        if self._value is not Unset:
            yield self._value


def nones(count, /):
    """
    Return a tuple of `count` fresh, independent, empty slots.
    """
    if not isinstance(count, int) or isinstance(count, bool):
        raise TypeError("nones() argument must be an integer")
    if count < 0:
        raise ValueError("nones() argument must be a non-negative integer")
    return tuple(Slot() for _ in range(count))


def values(slots, /, default=None):
    """
    Unpack slots into plain values, substituting `default` for empty ones.

    Example
    - values((Slot(5), Slot(), Slot("large"))) -> (5, None, "large")
    """
    return tuple(slot.get(default) for slot in slots)


__all__ = (
    "EmptySlotError",
    "Slot",
    "nones",
    "values",
)
