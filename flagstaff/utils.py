"""
flagstaff utilities (small shared building blocks).

Overview
- UnsetType / Unset
  • Singleton sentinel for "not declared" where None is itself a meaningful value
    (an option may legitimately default to None, 0 or "").
  • Falsy, printable as "Unset", sealed against subclassing.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value, falsy or not, passes through.

- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__ for tracebacks and reprs.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers are
    returned as fresh snapshots so schema state cannot be mutated through the API.

Quick examples
    >>> coalesce(Unset, 2)
    2
    >>> coalesce(0, 2)
    0
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were never declared.

    - bool(Unset) is False, but Unset is neither None nor 0.
    - UnsetType() always returns the same instance.
    - Participates in PEP 604 unions so `isinstance(x, str | Unset)` reads naturally.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is Unset, in which case return `default`.

    Falsy values such as None, 0, "" and [] are kept as they are.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator that does.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _snapshot(object):
    """
    Copy containers recursively so callers never hold the backing object.

    - Sequence (non-string) -> tuple
    - Mapping -> dict (keys kept, values snapshotted)
    - Set -> frozenset
    - anything else is returned unchanged (compiled patterns, callables, specs)
    """
    if isinstance(object, Sequence) and not isinstance(object, str | bytes):
        return tuple(map(_snapshot, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_snapshot, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_snapshot, object))
    return object


def mirror(name, /):
    """
    Build a read-only property that exposes snapshots of `self._{name}`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
