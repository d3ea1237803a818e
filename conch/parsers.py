r"""
Conch typed parsers: named, pluggable string → value converters.

Overview
- ParseSummary: the outcome of one parse. Success is the message-less case;
  a failure carries a human-readable message.
- Parser: a named callable `parser(raw) -> (value, summary)` bound to a result
  type. Calling a parser never raises: converters that raise ValueError or
  TypeError are reported through the summary, and the parser's type default
  is returned as the value.
- Registry: parsers are registered by (name, type). Several parsers may share
  a type (e.g. "bool" and "switch" both produce bool) and several may share a
  name across types; resolve(name, type) then selects by type.

Built-ins
- boolean ("bool", bool): case-insensitive "true"/"false".
- switch ("switch", bool): case-insensitive "on"/"off", an alternate flag vocabulary.
- integer ("int", int), real ("float", float), text ("str", str).

Failure wording
- Expected input compatible with type <T>, got '<raw>'.

Quick example
    >>> from conch.parsers import parser, ParseSummary
    >>> @parser("percent", type=float, label="percent (0-100)")
    ... def parse_percent(raw):
    ...     value = float(raw.rstrip("%"))
    ...     if not 0 <= value <= 100:
    ...         return 0.0, ParseSummary.type_mismatch("percent (0-100)", raw)
    ...     return value, ParseSummary.success
    >>> parse_percent("42%")
    (42.0, ParseSummary(message=None))
"""
import builtins
from typing import NamedTuple

from .utils import Unset, coalesce, normalize, rename


class ParseSummary(NamedTuple):
    message: str | None = None

    @property
    def is_error(self):
        return self.message is not None

    @classmethod
    def type_mismatch(cls, expected, raw, /):
        return cls(f"Expected input compatible with type {expected}, got '{raw}'.")


ParseSummary.success = ParseSummary()

_DEFAULTS = {bool: False, int: 0, float: 0.0, str: ""}

# (normalized name, type) -> Parser, in registration order
_parsers = {}
# type -> Parser used when a caller asks for a type instead of a name
_primaries = {}


class Parser:
    """
    A named, typed parse function.

    Parameters
    - function: Callable[[str], tuple[value, ParseSummary]]
    - name: registry name (case-insensitive).
    - type: the produced value type.
    - label: type label used in mismatch messages (defaults to type.__name__).
    - default: value returned alongside a failed summary (defaults to the
      type's zero value for builtins, None otherwise).
    """
    __slots__ = ("_function", "name", "type", "label", "default")

    def __init__(self, function, /, name, *, type, label=Unset, default=Unset):
        if not callable(function):
            raise TypeError("Parser() function must be callable")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Parser() name must be a non-empty string")
        if not isinstance(type, builtins.type):
            raise TypeError("Parser() type must be a type")
        self._function = function
        self.name = normalize(name.strip())
        self.type = type
        self.label = coalesce(label, type.__name__)
        self.default = coalesce(default, _DEFAULTS.get(type))

    def __call__(self, raw, /):
        try:
            value, summary = self._function(raw)
        except (ValueError, TypeError):
            return self.default, ParseSummary.type_mismatch(self.label, raw)
        if summary.is_error:
            return self.default, summary
        return value, summary

    def __repr__(self):
        return f"parser(name={self.name!r}, type={self.type.__name__})"


def register(parser, /, *, primary=False):
    """
    Add a Parser to the registry.

    - a parser with the same (name, type) replaces the previous one.
    - primary=True makes it the parser used when callers pass the bare type
      (e.g. context.parse_argument(0, "count", int)); the first parser
      registered for a type becomes primary automatically.
    """
    if not isinstance(parser, Parser):
        raise TypeError("register() argument must be a Parser")
    _parsers[parser.name, parser.type] = parser
    if primary or parser.type not in _primaries:
        _primaries[parser.type] = parser
    return parser


def parser(name, /, *, type, label=Unset, default=Unset, primary=False):
    """
    Decorator: turn a `raw -> (value, ParseSummary)` function into a registered Parser.
    """
    @rename("parser")
    def decorator(function):
        return register(Parser(function, name, type=type, label=label, default=default), primary=primary)
    return decorator


def converter(function, /, name=Unset, *, type=Unset, label=Unset, default=Unset, primary=False):
    """
    Register a plain converter (a callable that returns the value or raises
    ValueError/TypeError), such as int or a host's Path-like constructor.

    name defaults to the function name; type defaults to the function itself
    when it is a class.
    """
    type = coalesce(type, function if isinstance(function, builtins.type) else Unset)
    if type is Unset:
        raise TypeError("converter() requires a type when the function is not a class")

    @rename(f"convert_{coalesce(name, function.__name__)}")
    def convert(raw):
        return function(raw), ParseSummary.success

    return register(
        Parser(convert, coalesce(name, function.__name__), type=type, label=label, default=default),
        primary=primary,
    )


def resolve(parser, /, type=Unset):
    """
    Resolve a parser designator to a Parser.

    designators
    - Parser: returned as-is.
    - a type (int, bool, ...): the primary parser for that type.
    - a name (str): the parser registered under that name; when several types
      share it, `type` selects one (an ambiguous name without a type is an error).

    errors
    - LookupError when nothing (or more than one thing) matches.
    - TypeError for any other designator.
    """
    if isinstance(parser, Parser):
        return parser
    if isinstance(parser, builtins.type):
        try:
            return _primaries[parser]
        except KeyError:
            raise LookupError(f"no parser registered for type {parser.__name__!r}") from None
    if not isinstance(parser, str):
        raise TypeError("resolve() argument must be a Parser, a type or a parser name")

    name = normalize(parser)
    candidates = [
        candidate for (key, kind), candidate in _parsers.items()
        if key == name and (type is Unset or kind is type)
    ]
    if not candidates:
        suffix = "" if type is Unset else f" for type {type.__name__!r}"
        raise LookupError(f"no parser named {parser!r}{suffix}")
    if len(candidates) > 1:
        raise LookupError(f"parser name {parser!r} is ambiguous; pass the expected type")
    return candidates[0]


def registered():
    """
    All registered parsers in registration order.
    """
    return tuple(_parsers.values())


@parser("bool", type=bool, primary=True)
def boolean(raw):
    if raw.lower() == "true":
        return True, ParseSummary.success
    if raw.lower() == "false":
        return False, ParseSummary.success
    return False, ParseSummary.type_mismatch("bool", raw)


@parser("switch", type=bool, label="switch (on/off)")
def switch(raw):
    if raw.lower() == "on":
        return True, ParseSummary.success
    if raw.lower() == "off":
        return False, ParseSummary.success
    return False, ParseSummary.type_mismatch("switch (on/off)", raw)


integer = converter(int, "int", primary=True)
real = converter(float, "float", primary=True)
text = converter(str, "str", primary=True)


__all__ = (
    "ParseSummary",
    "Parser",
    "register",
    "parser",
    "converter",
    "resolve",
    "registered",
    "boolean",
    "switch",
    "integer",
    "real",
    "text",
)
