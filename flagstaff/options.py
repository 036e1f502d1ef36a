r"""
flagstaff option declarations and type predicates.

Overview
- OptionSpec: one declared positional argument or named flag
  (name, aliases, type, required, default, help).
- Value / Thunk: the two shapes of a declared default. A Value holds a literal;
  a Thunk holds a zero-argument callable evaluated each time a default is needed.
- validate(type, value): the type predicate table shared by positional and flag values.

Metadata (sanitized on construction)
- name: non-empty string, no leading hyphen, no whitespace or '=', not the reserved '_'.
- aliases: a string or an iterable of strings following the same rules; duplicates
  and aliases equal to the name are rejected. Stored as an ordered tuple.
- type: None, a predicate name ("string", "integer", "number", "boolean", "array",
  "none"), a callable predicate, or a compiled regular expression.
- required: bool.
- default: Unset (not declared), a Value/Thunk, a callable (wrapped into a Thunk)
  or any other object (wrapped into a Value).
- help: non-empty string when provided; None otherwise.

Quick example:
    >>> spec = OptionSpec("int", aliases=("i", "integer"), type="integer", default=lambda: 1)
    >>> spec.identifiers
    ('int', 'i', 'integer')
    >>> spec.resolve()
    1
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from typing import final

from .faults import FaultCode, UnsupportedTypeError, getdoc
from .utils import *


@final
class Value:
    """
    Literal default.
    """
    __slots__ = ("_value",)

    def __init__(self, value, /):
        self._value = value

    @property
    def value(self):
        return self._value

    def resolve(self):
        return self._value

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash((Value, repr(self._value)))

    def __repr__(self):
        return f"Value({self._value!r})"


@final
class Thunk:
    """
    Lazy default: the callable runs on every resolve() and nothing is cached.
    """
    __slots__ = ("_callback",)

    def __init__(self, callback, /):
        if not callable(callback):
            raise TypeError("Thunk() argument must be callable")
        self._callback = callback

    @property
    def callback(self):
        return self._callback

    def resolve(self):
        return self._callback()

    def __repr__(self):
        return f"Thunk({getattr(self._callback, '__qualname__', self._callback)!r})"


def _isinteger(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _isnumber(value):
    return isinstance(value, int | float) and not isinstance(value, bool)


_PREDICATES = {
    "none": lambda value: True,
    "string": lambda value: isinstance(value, str),
    "integer": _isinteger,
    "number": _isnumber,
    "boolean": lambda value: isinstance(value, bool),
    "array": lambda value: isinstance(value, list | tuple),
}


def validate(type, value, /):
    """
    Check `value` against a declared option type.

    Predicates
    - None / "none": always valid
    - "string": a str
    - "integer": an int (bools excluded) or a float without fractional part
    - "number": an int or float (bools excluded)
    - "boolean": strictly a bool
    - "array": a list or tuple
    - compiled pattern: a str in which the pattern matches (re.search semantics)
    - callable: the callable itself is the predicate; TypeError/ValueError raised by it
      count as a failed validation

    Raises
    - UnsupportedTypeError: for any other declared type (a schema authoring bug).
    """
    if type is None:
        return True
    if isinstance(type, str):
        try:
            predicate = _PREDICATES[type]
        except KeyError:
            predicate = None
        if predicate is not None:
            return predicate(value)
    elif isinstance(type, re.Pattern):
        return isinstance(value, str) and type.search(value) is not None
    elif callable(type):
        try:
            return bool(type(value))
        except (TypeError, ValueError):
            return False

    raise UnsupportedTypeError(
        "type %r and value %r not supported" % (type, value),
        title="unsupported option type",
        code=FaultCode.UNSUPPORTED_TYPE,
        hint="declare one of %s, a callable, or a compiled pattern" % ", ".join(map(repr, _PREDICATES)),
        type=type,
        value=value,
        docs=getdoc(FaultCode.UNSUPPORTED_TYPE)
    )


class SpecType(type):
    """
    Metaclass giving specs read-only properties and stable representations.

    - every name in __introspectable__ becomes a mirror() property over "_" + name.
    - __typename__ is the hyphenated lowercase class name, used in messages.
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identifier(cls, identifier, label, /):
    if not isinstance(identifier, str):
        raise TypeError(f"{cls.__typename__} {label} must be a string")
    elif not (identifier := identifier.strip()):
        raise ValueError(f"{cls.__typename__} {label} cannot be empty")
    elif identifier == "_":
        raise ValueError(f"{cls.__typename__} {label} '_' is reserved for leftover positionals")
    elif not re.fullmatch(r"[^\s=\-][^\s=]*", identifier):
        raise ValueError(f"{cls.__typename__} {label} {identifier!r} must not start with '-' or contain spaces or '='")
    return identifier


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate 'name' and normalize 'aliases' into an ordered, unique tuple.
    """
    metadata["name"] = name = _sanitize_identifier(cls, metadata["name"], "'name'")

    aliases = metadata["aliases"]
    if aliases is None:
        aliases = ()
    elif isinstance(aliases, str):
        aliases = (aliases,)
    elif not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be a string or an iterable of strings")

    sanitized = []
    for alias in aliases:
        alias = _sanitize_identifier(cls, alias, "alias")
        if alias == name:
            raise ValueError(f"{cls.__typename__} alias {alias!r} repeats its name")
        if alias in sanitized:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates")
        sanitized.append(alias)
    metadata["aliases"] = tuple(sanitized)


def _sanitize_semantics(cls, metadata, /):
    """
    Internal: check 'type' shape, wrap 'default' into a Value/Thunk, trim 'help'.

    Unknown type names are accepted here and reported by validate() at parse time.
    """
    if not (metadata["type"] is None or isinstance(metadata["type"], str | re.Pattern) or callable(metadata["type"])):
        raise TypeError(f"{cls.__typename__} 'type' must be a string, a callable, or a compiled pattern")

    match metadata["default"]:
        case UnsetType() | Value() | Thunk():
            pass
        case default if callable(default):
            metadata["default"] = Thunk(default)
        case default:
            metadata["default"] = Value(default)

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)


class OptionSpec(metaclass=SpecType):
    """
    Declaration of one positional argument or named flag.

    Whether a spec is an argument or a flag depends only on which Schema list it is
    placed in. Instances are immutable; properties return snapshots.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "type",
        "required",
        "default",
        "help",
    )

    def __new__(cls, name, /, aliases=(), type=None, required=False, default=Unset, help=Unset):
        metadata = {
            "name": name,
            "aliases": aliases,
            "type": type,
            "required": bool(required),
            "default": default,
            "help": help,
        }
        _sanitize_identity(cls, metadata)
        _sanitize_semantics(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @classmethod
    def from_mapping(cls, mapping, /):
        """
        Build a spec from a plain mapping.

        Keys: name, alias or aliases, type, required, default, help or description.
        """
        if not isinstance(mapping, Mapping):
            raise TypeError(f"{cls.__typename__} mapping must be a mapping")

        fields = dict(mapping)
        for first, second in (("alias", "aliases"), ("help", "description")):
            if first in fields and second in fields:
                raise TypeError(f"{cls.__typename__} mapping cannot have both {first!r} and {second!r}")

        try:
            name = fields.pop("name")
        except KeyError:
            raise TypeError(f"{cls.__typename__} mapping must have a 'name'") from None

        aliases = fields.pop("alias", fields.pop("aliases", ()))
        help = fields.pop("help", fields.pop("description", Unset))
        if unknown := set(fields) - {"type", "required", "default"}:
            raise TypeError(f"{cls.__typename__} mapping has unknown keys: {', '.join(sorted(unknown))}")

        return cls(name, aliases, help=Unset if help is None else help, **fields)

    @property
    def identifiers(self):
        """
        The canonical name followed by every alias.
        """
        return (self._name, *self._aliases)

    @property
    def typename(self):
        """
        Display form of the declared type, or None when no type was declared.
        """
        match self._type:
            case None:
                return None
            case str():
                return self._type
            case re.Pattern():
                return "/%s/" % self._type.pattern
            case _:
                name = getattr(self._type, "__name__", "function")
                return "function" if name == "<lambda>" else name

    def resolve(self):
        """
        Evaluate the declared default (None when none was declared).
        """
        return self._default.resolve() if self._default is not Unset else None


__all__ = (
    "OptionSpec",
    "Value",
    "Thunk",
    "validate",
)

# Keep the metaclass out of star-imports and documentation.
del SpecType
