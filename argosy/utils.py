"""
Argosy utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the arguments, grammar and providers layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- kebabize(name)
  • Derive a switch name from a field name ("_intVal" / "int_val" → "int-val").

- conjoin(items, joiner="and")
  • Natural-language list rendering ("a, b and c") used by user-facing messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> kebabize("_cleanCache")
    'clean-cache'
    >>> conjoin(['"a"', '"b"', '"c"'])
    '"a", "b" and "c"'
"""
import functools
import re
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

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

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def kebabize(name, /):
    """
    Convert a field identifier into its switch name.

    Rules
    - leading underscores (the "private" marker) are stripped first.
    - words are split on underscores and on case boundaries
      ("intVal" → int, val; "HTTPPort" → http, port; "md5Sum" → md5, sum);
      case follows str.isupper(), so non-ASCII letters stay inside their word
      ("maxGröße" → max, größe).
    - words are lowercased and joined with hyphens.

    Examples
    - kebabize("increment")   -> "increment"
    - kebabize("_intVal")     -> "int-val"
    - kebabize("clean_cache") -> "clean-cache"
    """
    if not isinstance(name, str):
        raise TypeError("kebabize() argument must be a string")
    words = []
    for part in re.split(r"_+", name.lstrip("_")):
        word = ""
        for index, char in enumerate(part):
            following = part[index + 1:index + 2]
            # an uppercase letter opens a word after a lowercase letter or digit,
            # and closes an acronym when a lowercase letter follows it
            if word and char.isupper() and (not word[-1].isupper() or following.islower()):
                words.append(word)
                word = ""
            word += char
        if word:
            words.append(word)
    return "-".join(word.lower() for word in words)


def conjoin(items, joiner="and", /):
    """
    Render items as a natural-language list with a final joiner word.

    Behavior
    - zero items → ""
    - one item   → the item itself
    - otherwise  → "a, b <joiner> c"

    Items are converted with str(); the joiner defaults to "and" and can be any
    word supplied by the caller (e.g., "or").
    """
    items = [str(item) for item in items]
    if not items:
        return ""
    last = items.pop()
    if not items:
        return last
    return "%s %s %s" % (", ".join(items), joiner, last)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "kebabize",
    "conjoin",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
