r"""
flagstaff default tokenizer.

Splits a raw argv-like list into leftover positionals and a flat mapping of flag
values, following the familiar "minimist" grammar. The schema binder treats the
tokenizer as a black box; any callable matching the Tokenizer protocol can be
passed to Schema(tokenizer=...).

Grammar
- "--key=value"        key = value
- "--no-key"           key = False
- "--key value"        key = value (unless key is boolean or value looks like a switch)
- "--key true|false"   key = bool, consuming the literal
- "--key"              key = True ("" for string keys)
- "-abc"               a = b = True; c takes the next token like "--c" would
- "-n5", "-k=v"        n = 5, k = "v"
- "--"                 everything after it is positional, kept verbatim

Coercion
- numeric-looking strings (123, -1.5, 1e3, 0x1f; ASCII digits only) become int/float
  unless the key is string-typed. Positional numbers are coerced too.
- boolean keys start as False; a write to any key fans out to its aliases.
- a non-boolean key given more than once collects its values into a list.
"""
import re
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import NamedTuple, Protocol

_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[-+]?\d+)?", re.IGNORECASE | re.ASCII)
_HEXADECIMAL = re.compile(r"0x[0-9a-f]+", re.IGNORECASE | re.ASCII)
_LETTER = re.compile(r"[A-Za-z]")
_ATTACHED = re.compile(r"-?\d+(\.\d*)?(e-?\d+)?", re.ASCII)
_SWITCH = re.compile(r"--?[^-]")


class Tokens(NamedTuple):
    positionals: list
    values: dict


class Tokenizer(Protocol):
    def __call__(
            self,
            tokens: Iterable[str],
            /,
            *,
            booleans: Iterable[str] = ...,
            strings: Iterable[str] = ...,
            aliases: Mapping[str, Iterable[str]] | None = ...,
    ) -> Tokens: ...


def isnumeric(token, /):
    """
    True when the token is an int/float or a string that reads as one.
    """
    if isinstance(token, int | float) and not isinstance(token, bool):
        return True
    if not isinstance(token, str):
        return False
    return bool(_HEXADECIMAL.fullmatch(token) or _NUMBER.fullmatch(token))


def tonumber(token, /):
    """
    Convert a numeric-looking string (see isnumeric) into an int or a float.
    """
    if _HEXADECIMAL.fullmatch(token):
        return int(token, 16)
    try:
        return int(token)
    except ValueError:
        return float(token)


def _relate(aliases, /):
    """
    Expand a name -> aliases mapping into a symmetric key -> related keys mapping.
    """
    related = defaultdict(list)
    for key, others in (aliases or {}).items():
        others = [others] if isinstance(others, str) else list(others)
        group = [key, *others]
        for member in group:
            for other in group:
                if other != member and other not in related[member]:
                    related[member].append(other)
    return related


def tokenize(tokens, /, *, booleans=(), strings=(), aliases=None):
    """
    Tokenize argv-like strings into Tokens(positionals, values).

    Parameters
    - tokens: Iterable[str]
    - booleans: names of presence-style keys (never consume the next token)
    - strings: names of keys whose values are never coerced to numbers
    - aliases: mapping from a key to one alias (str) or many aliases

    Returns
    - Tokens: positionals in input order, and values keyed by every name and alias.
    """
    tokens = list(tokens)
    related = _relate(aliases)

    # Typing fans out across alias groups.
    bools = set(booleans)
    for key in list(bools):
        bools.update(related[key])
    texts = set(strings)
    for key in list(texts):
        texts.update(related[key])

    values = {}
    positionals = []

    def put(key, value):
        if key not in values or key in bools or isinstance(values[key], bool):
            values[key] = value
        elif isinstance(values[key], list):
            values[key].append(value)
        else:
            values[key] = [values[key], value]

    def assign(key, value):
        if key not in texts and isinstance(value, str) and isnumeric(value):
            value = tonumber(value)
        put(key, value)
        for other in related[key]:
            put(other, value)

    def takes(key, following):
        # whether `key` may consume `following` as its value
        return (
            following is not None
            and not _SWITCH.match(following)
            and key not in bools
            and not any(other in bools for other in related[key])
        )

    for key in sorted(bools):
        assign(key, False)

    try:
        index = tokens.index("--")
    except ValueError:
        verbatim = []
    else:
        tokens, verbatim = tokens[:index], tokens[index + 1:]

    index = 0
    while index < len(tokens):
        token = tokens[index]
        following = tokens[index + 1] if index + 1 < len(tokens) else None

        if match := re.fullmatch(r"--([^=]+)=(.*)", token, re.DOTALL):
            key, value = match[1], match[2]
            assign(key, value != "false" if key in bools else value)
        elif match := re.fullmatch(r"--no-(.+)", token, re.DOTALL):
            assign(match[1], False)
        elif match := re.fullmatch(r"--(.+)", token, re.DOTALL):
            key = match[1]
            if takes(key, following):
                assign(key, following)
                index += 1
            elif following in ("true", "false"):
                assign(key, following == "true")
                index += 1
            else:
                assign(key, "" if key in texts else True)
        elif re.match(r"-[^-]+", token):
            letters = token[1:-1]
            broken = False
            for offset, letter in enumerate(letters):
                rest = token[offset + 2:]
                if rest == "-":
                    assign(letter, rest)
                    continue
                if _LETTER.fullmatch(letter) and rest.startswith("="):
                    assign(letter, rest[1:])
                    broken = True
                    break
                if _LETTER.fullmatch(letter) and _ATTACHED.fullmatch(rest):
                    assign(letter, rest)
                    broken = True
                    break
                if offset + 1 < len(letters) and re.match(r"\W", letters[offset + 1], re.ASCII):
                    assign(letter, rest)
                    broken = True
                    break
                assign(letter, "" if letter in texts else True)

            key = token[-1]
            if not broken and key != "-":
                if following and takes(key, following):
                    assign(key, following)
                    index += 1
                elif following in ("true", "false"):
                    assign(key, following == "true")
                    index += 1
                else:
                    assign(key, "" if key in texts else True)
        else:
            positionals.append(tonumber(token) if isnumeric(token) else token)
        index += 1

    positionals.extend(verbatim)
    return Tokens(positionals, values)


__all__ = (
    "Tokens",
    "Tokenizer",
    "tokenize",
    "isnumeric",
    "tonumber",
)
