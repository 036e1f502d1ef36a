"""
flagstaff schema layer: bind tokens to declared arguments and flags.

What this module provides
- Schema: an immutable pair of option lists (positional `args`, named `flags`) that
  • parses argv-like tokens into typed values (parse),
  • resolves defaults, enforces required options and validates types,
  • renders two-column help (help, args_help, flags_help, render_help, print_help),
  • acts as the process boundary for command-line scripts (invoke).
- ParseResult: the (args, flags) pair returned by parse.

Parsing phases
1. tokenize: the tokenizer receives the boolean names, string names and alias map
   derived from the flag specs and returns positionals plus raw flag values.
2. bind: positional i is validated against args[i] and written under every identifier
   of that spec; positionals beyond the declared list are kept under their own text.
   The full leftover list is stored under "_".
3. settle: for every option and identifier, a missing or falsy value takes the option's
   default (thunks run at most once per spec per parse) or fails when required;
   a present value is validated against the option's type.

Fault policy
- By default the first TypeMismatchError or MissingRequiredError is raised as is.
- With deferred=True every fault of the parse is collected and raised as one ParseExit.
- UnsupportedTypeError (a schema bug) is always raised immediately.
- parse never prints and never exits; only invoke(shell=True) does.

Quick start
    from flagstaff import Schema

    schema = Schema(
        args=[{"name": "hello", "type": "string", "help": "an argument for saying hello"}],
        flags=[
            {"name": "message", "alias": "m", "type": "boolean"},
            {"name": "int", "alias": ["i", "integer"], "type": "integer"},
        ],
    )
    args, flags = schema.parse(["hi", "-m", "--int", "17"])
    print(schema.help())
"""
import functools
import operator
import os.path
import re
import shlex
import sys
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import NamedTuple

from rich.console import Console

from . import helptext
from .faults import *
from .options import OptionSpec, validate
from .tokenizer import tokenize
from .utils import *


class ParseResult(NamedTuple):
    args: dict
    flags: dict


class SchemaType(type):
    """
    Metaclass exposing __introspectable__ names as read-only properties.

    - __typename__ is derived from the class name for messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


@functools.cache
def _ordinal(number):
    """
    Human-friendly ordinal for a 1-based position ("first", ..., "tenth", "11th", ...).
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth"
        )[number - 1]
    except IndexError:
        pass
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _process_specs(cls, metadata, key, /):
    """
    Internal: turn the declared list under `key` into a tuple of OptionSpec.

    Plain mappings are accepted and converted with OptionSpec.from_mapping. Every name
    and alias must be unique within the list.
    """
    if isinstance(metadata[key], str | Mapping) or not isinstance(metadata[key], Iterable):
        raise TypeError(f"{cls.__typename__} {key!r} must be an iterable of option specs")

    specs = []
    seen = {}
    for index, item in enumerate(metadata[key]):
        if isinstance(item, Mapping):
            item = OptionSpec.from_mapping(item)
        elif not isinstance(item, OptionSpec):
            raise TypeError(f"{cls.__typename__} {key!r} items must be option specs or mappings")

        for identifier in item.identifiers:
            if (owner := seen.setdefault(identifier, index)) != index:
                raise ValueError(
                    f"{cls.__typename__} {key!r} identifier {identifier!r} of {item.name!r} is already used by {specs[owner].name!r}"
                )
        specs.append(item)
    metadata[key] = tuple(specs)


def _process_runtime(cls, metadata, /):
    """
    Internal: check name/indent/tokenizer and normalize runtime switches to bools.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if isinstance(indent := metadata["indent"], bool) or not isinstance(indent, int):
        raise TypeError(f"{cls.__typename__} 'indent' must be an integer")
    elif indent < 0:
        raise ValueError(f"{cls.__typename__} 'indent' cannot be negative")

    if not callable(metadata["tokenizer"]):
        raise TypeError(f"{cls.__typename__} 'tokenizer' must be callable")

    for switch in ("deferred", "shell", "fancy", "colorful"):
        metadata[switch] = bool(metadata[switch])


class Schema(metaclass=SchemaType):
    """
    Declared positional arguments and named flags, with parsing and help rendering.

    A schema never changes after construction and keeps no per-call state, so one
    instance can serve any number of parse/help calls.
    """

    __introspectable__ = (
        "name",
        "args",
        "flags",
        "indent",
        "tokenizer",
        "deferred",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "args",
        "flags",
        "deferred",
        "shell",
    )

    validate = staticmethod(validate)

    def __new__(
            cls,
            args=(),
            flags=(),
            *,
            name=Unset,
            indent=2,
            tokenizer=tokenize,
            deferred=False,
            shell=False,
            fancy=False,
            colorful=True
    ):
        """
        Construct a Schema.

        Parameters
        - args: Iterable[OptionSpec | Mapping]
          Positional arguments in binding order.
        - flags: Iterable[OptionSpec | Mapping]
          Named flags in help display order.
        - name: str
          Program name used in fault headers (defaults to the running script's name).
        - indent: int
          Spaces before every help row.
        - tokenizer: Tokenizer
          Collaborator splitting raw tokens (flagstaff.tokenizer.tokenize by default).
        - deferred: bool
          Collect every fault of a parse and raise them together as ParseExit.
        - shell: bool
          invoke() prints faults through rich and exits instead of raising.
        - fancy, colorful: bool
          Presentation of rendered faults and help.

        Raises
        - TypeError/ValueError on malformed specs, duplicated identifiers or bad settings.
        """
        metadata = {
            "name": coalesce(name, os.path.basename(sys.argv[0] if sys.argv else "") or "flagstaff"),
            "args": args,
            "flags": flags,
            "indent": indent,
            "tokenizer": tokenizer,
            "deferred": deferred,
            "shell": shell,
            "fancy": fancy,
            "colorful": colorful,
        }
        _process_specs(cls, metadata, "args")
        _process_specs(cls, metadata, "flags")
        _process_runtime(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        # Tokenizer configuration never changes; derive it once.
        self._booleans = tuple(flag.name for flag in self._flags if flag.type == "boolean")
        self._strings = tuple(flag.name for flag in self._flags if flag.type == "string")
        self._aliases = MappingProxyType({flag.name: flag.aliases for flag in self._flags if flag.aliases})
        return self

    def _fault(self, faults, fault, /):
        if not self._deferred:
            raise fault
        faults.append(fault)

    def _mismatch(self, option, value, /, *, kind, index=Unset):
        where = f" at {_ordinal(index + 1)} position" if index is not Unset else ""
        return TypeMismatchError(
            "%s %r%s must be of type %s, got %r" % (kind, option.name, where, option.typename, value),
            title="type mismatch",
            code=FaultCode.TYPE_MISMATCH,
            hint="pass a value of type %s for %s" % (
                option.typename, option.name if kind == "argument" else "--" + option.name
            ),
            option=option.name,
            kind=kind,
            value=value,
            expected=option.type,
            index=coalesce(index),
            docs=getdoc(FaultCode.TYPE_MISMATCH)
        )

    def _missing(self, option, /, *, kind, index):
        if kind == "argument":
            hint = "pass a value at the %s position" % _ordinal(index + 1)
        else:
            hint = "pass --%s with a value" % option.name
        return MissingRequiredError(
            "%s %r is required" % (kind, option.name),
            title="missing required %s" % kind,
            code=FaultCode.MISSING_REQUIRED,
            hint=hint,
            option=option.name,
            kind=kind,
            index=index,
            docs=getdoc(FaultCode.MISSING_REQUIRED)
        )

    def _settle(self, options, bag, faults, /, *, kind, skip=frozenset()):
        """
        Fill defaults, enforce required options and validate present values in place.
        """
        for index, option in enumerate(options):
            if option.name in skip:
                continue
            default = Unset
            for identifier in option.identifiers:
                if not bag.get(identifier):
                    if default is Unset:
                        default = option.resolve()
                    if not default and option.required:
                        self._fault(faults, self._missing(option, kind=kind, index=index))
                        break
                    bag[identifier] = default
                elif not validate(option.type, bag[identifier]):
                    self._fault(faults, self._mismatch(option, bag[identifier], kind=kind))
                    break

    def parse(self, tokens=(), /):
        """
        Parse argv-like tokens into ParseResult(args, flags).

        Raises
        - TypeMismatchError / MissingRequiredError on the first fault (default).
        - ParseExit with every fault when the schema is deferred.
        - UnsupportedTypeError when a spec declares an unknown type.
        - TypeError when tokens is not an iterable of strings.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        faults = []
        positionals, values = self._tokenizer(
            tokens,
            booleans=self._booleans,
            strings=self._strings,
            aliases=dict(self._aliases),
        )

        args = {}
        rejected = set()
        for index, token in enumerate(positionals):
            if index >= len(self._args):
                args[str(token)] = token
                continue
            option = self._args[index]
            if validate(option.type, token):
                args.update(dict.fromkeys(option.identifiers, token))
            else:
                rejected.add(option.name)
                self._fault(faults, self._mismatch(option, token, kind="argument", index=index))
        args["_"] = list(positionals)

        flags = dict(values)

        self._settle(self._args, args, faults, kind="argument", skip=rejected)
        self._settle(self._flags, flags, faults, kind="flag")

        if faults:
            raise ParseExit(faults, schema=self)
        return ParseResult(args, flags)

    def render_help(
            self,
            *,
            args_header="Arguments:",
            flags_header="Flags:",
            left=Unset,
            right=Unset,
            width=80,
            gutter=4,
            expanded=False,
            colorful=Unset
    ):
        """
        Styled help as rich Text (see flagstaff.helptext for the layout rules).
        """
        return helptext.render(
            self._args,
            self._flags,
            args_header=args_header,
            flags_header=flags_header,
            indent=self._indent,
            left=left,
            right=right,
            width=width,
            gutter=gutter,
            expanded=expanded,
            colorful=coalesce(colorful, self._colorful),
        )

    def help(self, **options):
        """
        Plain help: the argument section, a blank line, then the flag section.

        Accepts the keywords of render_help (args_header, flags_header, left, right,
        width, gutter, expanded). A colorful keyword is ignored.
        """
        return self.render_help(**(options | {"colorful": False})).plain

    def _section(self, header, options, *, flag, left, right, width, gutter, expanded):
        layout = helptext.measure(
            self._args, self._flags,
            indent=self._indent, left=left, right=right, width=width, gutter=gutter, expanded=expanded
        )
        return helptext.section(header, options, layout, flag=flag, expanded=expanded).plain

    def args_help(self, header="Arguments:", /, *, left=Unset, right=Unset, width=80, gutter=4):
        """
        Plain help for the arguments only ("" when there are none).
        """
        return self._section(
            header or "Arguments:", self._args,
            flag=False, left=left, right=right, width=width, gutter=gutter, expanded=False
        )

    def flags_help(self, header="Flags:", /, *, left=Unset, right=Unset, width=80, gutter=4, expanded=False):
        """
        Plain help for the flags only ("" when there are none).
        """
        return self._section(
            header or "Flags:", self._flags,
            flag=True, left=left, right=right, width=width, gutter=gutter, expanded=expanded
        )

    def print_help(self, console=None, /, **options):
        """
        Print styled help through a rich Console sized to that console's width.
        """
        if console is None:
            console = Console()
        console.print(self.render_help(**{"width": console.width} | options))

    def invoke(self, prompt=Unset, /):
        """
        Parse a command line at the process boundary.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string split with shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Behavior
        - Returns the ParseResult on success.
        - On a fault: re-raises it, or in shell mode prints help and the fault on stderr
          and exits with status 1.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
        else:
            raise TypeError("invoke() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens)
        except (SchemaException, ParseExit) as fault:
            if not self._shell:
                raise
            self.print_help(Console(stderr=True))
            trigger(fault, schema=self, shell=True, fancy=self._fancy, colorful=self._colorful)


__all__ = (
    "Schema",
    "ParseResult",
)

# Keep the metaclass out of star-imports and documentation.
del SchemaType
