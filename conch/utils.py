"""
Conch utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the scanner, context, shell and autocomplete
  layers so that names, sentinels and wording behave the same everywhere.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- normalize(name)
  • The single case-normalization rule for command, option and variable names.

- CaseInsensitiveDict
  • Mapping that canonicalizes every key through normalize() on every operation.

- ordinal(number) / pluralize(word, count)
  • Wording helpers for diagnostics ("1st", "2nd", "1 argument", "2 arguments").

Stability and contract
- Names listed in __all__ are re-exported by the package; anything else may change.
"""
import builtins
import functools
from collections.abc import MutableMapping
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (a flag-style option has
    a None value, a parser may legitimately produce None), but the API needs a
    way to distinguish “not provided” from “provided as None”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Returns the given object unless it is the Unset sentinel, in which case the
    provided default is returned. Falsey values like None, 0 or "" are preserved.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None   # None is preserved, not replaced
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
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
                """Decorator wrapper that applies the new name to the target callable."""
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def normalize(name, /):
    """
    Return the canonical (case-normalized) form of a command, option or variable name.

    Every comparison between names in conch goes through this function, so the
    rule lives in exactly one place.
    """
    if not isinstance(name, str):
        raise TypeError("normalize() argument must be a string")
    return name.lower()


class CaseInsensitiveDict(MutableMapping):
    """
    Mapping whose keys are canonicalized with normalize() on every operation.

    This is a thin wrapper around a plain dict rather than a dict subclass:
    every entry point (get/set/delete/contains/pop) funnels through
    _key(), so there is no inherited method that could bypass normalization.

    Behavior
    - Keys are stored normalized; iteration yields the normalized keys in
      insertion order.
    - Assigning an existing key (in any casing) overwrites its value and keeps
      its original position.
    """
    __slots__ = ("_data",)

    def __init__(self, items=(), /, **kwargs):
        self._data = {}
        self.update(items, **kwargs)

    @staticmethod
    def _key(name):
        return normalize(name)

    def __getitem__(self, name, /):
        return self._data[self._key(name)]

    def __setitem__(self, name, value, /):
        self._data[self._key(name)] = value

    def __delitem__(self, name, /):
        del self._data[self._key(name)]

    def __contains__(self, name, /):
        return isinstance(name, str) and self._key(name) in self._data

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def clear(self):
        self._data.clear()

    def __repr__(self):
        return f"{type(self).__name__}({self._data!r})"


@functools.cache
def ordinal(number, /):
    """
    Return a numeric English ordinal for a 1-based position ("1st", "2nd", "11th").
    """
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def pluralize(word, count, /):
    """
    Best-effort English pluralizer for diagnostic wording.

    Returns the word unchanged when count is 1, otherwise applies the common
    suffix rules (s/sh/ch/x/z → +es, consonant+y → -ies, everything else → +s).

    Examples
    - pluralize("argument", 1) -> "argument"
    - pluralize("argument", 2) -> "arguments"
    - pluralize("entry", 0)    -> "entries"
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() first argument must be a string")
    if count == 1 or not word:
        return word
    lower = word.lower()
    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "normalize",
    "CaseInsensitiveDict",
    "ordinal",
    "pluralize",
)
