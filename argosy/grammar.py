"""
Argosy flag grammar: modifier table, token parsing and value coercion.

What this module provides
- Grammar.build(descriptors): register '-<shorthand>' and '--<switch>' for every
  named descriptor in one modifier table, and collect the mask prefixes that are
  matched separately (by prefix, never by exact lookup).
- Grammar.parse(tokens): resolve flag tokens to descriptors and coerce their words.
- coerce(type, words): the per-type coercion rules.
- tokenize(argv): group a flat argv list into positionals and flag → words.

Token shape
- Parsing consumes a mapping (or an iterable of pairs) from flag token to the
  words that followed it on the command line, e.g.
    {"--tables": ["pages", "tt_content"], "-dv": [], "--clean-cache": ["all"]}
- Anything not shaped like '-x' / '--xyz' is skipped.

Resolution of one token
- exact lookup of '<dashes><name>' in the modifier table;
- otherwise, once per token, mask prefixes are tried in field order: the suffix
  after the prefix (keeping its dashes) becomes a key of the mask value;
- otherwise a single-dash token is read as a cluster of shorthands ('-dv' is
  '-d' and '-v', each receiving the token's words);
- otherwise the token is an unknown modifier: a fatal fault.
"""
import re
from collections import deque
from collections.abc import Mapping
from types import MappingProxyType

from .faults import FaultCode, UnknownModifierError
from .utils import *

_TOKEN = re.compile(r"(-{1,2})(.+)", re.DOTALL)
_INTEGER = re.compile(r"\s*[+-]?\d+")
_FLOAT = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _leading(pattern, words, cast, fallback):
    # permissive numeric reading: the leading numeric part of the first word, or a zero
    if not words or not isinstance(words[0], str):
        return fallback
    match = pattern.match(words[0])
    return cast(match[0]) if match else fallback


def coerce(type, words, /):
    """
    Coerce the words attached to a flag according to a declared type.

    Rules
    - boolean: False when the first word is exactly "false" or "0", else True
      (a bare flag with no words is True).
    - string:  all words joined with ','.
    - integer: leading integer of the first word; 0 when there is none.
    - float:   leading float of the first word; 0.0 when there is none.
    - array:   the words, as a list.
    - anything else (untyped): the first word, or None without words.

    Non-numeric input never fails: "abc" reads as 0 and "12px" as 12.
    """
    words = _words(words)
    match type:
        case "boolean":
            return not (words and words[0] in ("false", "0"))
        case "string":
            return ",".join(map(str, words))
        case "integer":
            return _leading(_INTEGER, words, int, 0)
        case "float":
            return _leading(_FLOAT, words, float, 0.0)
        case "array":
            return list(words)
        case _:
            return words[0] if words else None


def _words(words):
    if words is None:
        return []
    if isinstance(words, str):
        return [words]
    return list(words)


def _pairs(tokens):
    if isinstance(tokens, Mapping):
        return tokens.items()
    return tokens


class Grammar:
    """
    Immutable flag grammar of one provider class.

    Attributes
    - descriptors: tuple of Descriptor, in field order.
    - modifiers: read-only mapping from '-x' / '--name' to a descriptor index.
    - masks: tuple of (index, prefix) pairs, in field order.
    """
    __slots__ = ("_descriptors", "_modifiers", "_masks")

    def __init__(self, descriptors, modifiers, masks):
        self._descriptors = tuple(descriptors)
        self._modifiers = MappingProxyType(dict(modifiers))
        self._masks = tuple(masks)

    descriptors = property(lambda self: self._descriptors)
    modifiers = property(lambda self: self._modifiers)
    masks = property(lambda self: self._masks)

    @classmethod
    def build(cls, descriptors, /):
        """
        Assign shorthands and register every shorthand and switch in one modifier table.

        Shorthands
        - each named descriptor is offered the first character of its field name
          (leading underscores stripped); the first descriptor to claim a character
          keeps it, later ones get none. Claims are case-sensitive.

        Mask descriptors are kept aside with their prefix. Two descriptors claiming
        the same switch is a declaration error (TypeError).
        """
        built = []
        modifiers = {}
        masks = []
        for descriptor in descriptors:
            if descriptor.prefix is not None:
                built.append(descriptor._replace(shorthand=None))
                masks.append((descriptor.index, descriptor.prefix))
                continue
            first = descriptor.field.lstrip("_")[:1]
            descriptor = descriptor._replace(shorthand=first if first and "-" + first not in modifiers else None)
            built.append(descriptor)
            for modifier in (
                    "-" + descriptor.shorthand if descriptor.shorthand else None,
                    "--" + descriptor.switch if descriptor.switch else None
            ):
                if modifier is None:
                    continue
                if modifier in modifiers:
                    raise TypeError("modifier %r is declared twice" % modifier)
                modifiers[modifier] = descriptor.index
        return cls(built, modifiers, masks)

    def __getitem__(self, index):
        return self._descriptors[index]

    def _capture(self, values, dashes, rest, words, current):
        for index, prefix in self._masks:
            if not rest.startswith(prefix):
                continue
            if index not in values:
                initial = current(self._descriptors[index]) if current else None
                values[index] = dict(initial) if isinstance(initial, Mapping) else {}
            values[index][dashes + rest[len(prefix):]] = list(words)
            return True
        return False

    def parse(self, tokens, /, *, current=None, notify=None):
        """
        Resolve flag tokens into coerced values keyed by descriptor index.

        Parameters
        - tokens: Mapping[str, Iterable[str]] | Iterable[tuple[str, Iterable[str]]]
        - current: optional callable(descriptor) returning the field's current value;
          it seeds a mask value the first time the mask captures a suffix.
        - notify: optional callable(descriptor, value) invoked as soon as a
          named descriptor resolves (used to switch debug mode on immediately).

        Returns
        - dict[int, object]: last occurrence wins for named descriptors, except
          arrays, which accumulate the words of every token resolving to them
          ('-t a --tables b' gives ['a', 'b']); mask values accumulate suffix
          keys across tokens.

        Raises
        - UnknownModifierError when a token resolves to nothing.
        """
        values = {}
        for token, words in _pairs(tokens):
            if not isinstance(token, str) or not (match := _TOKEN.fullmatch(token)):
                continue
            dashes, rest = match.groups()
            words = _words(words)

            pending = deque([rest])
            clustered = False
            while pending:
                candidate = pending.popleft()
                modifier = dashes + candidate
                try:
                    index = self._modifiers[modifier]
                except KeyError:
                    if not clustered:
                        if self._capture(values, dashes, rest, words, current):
                            break
                        if dashes == "-":
                            # read as combined shorthands: every character is a candidate
                            pending.extend(rest)
                            clustered = True
                            continue
                    raise UnknownModifierError(
                        'Unknown modifier "%s"' % modifier,
                        title="unknown modifier",
                        code=FaultCode.UNKNOWN_MODIFIER,
                        hint="run with --help to see all available switches",
                        modifier=modifier,
                    ) from None

                descriptor = self._descriptors[index]
                value = coerce(descriptor.type, words)
                if descriptor.type == "array" and isinstance(values.get(index), list):
                    value = values[index] + value
                values[index] = value
                if notify is not None:
                    notify(descriptor, value)
        return values


def tokenize(argv, /):
    """
    Group a flat argv list into (positionals, tokens).

    - words before the first flag are positionals (the first one names the action);
    - a flag token ('-x', '--name', '-abc') starts a new entry and collects the
      following non-flag words;
    - '--name=value' carries 'value' inline as its first word;
    - negative numbers ('-5', '-1.5') are words, not flags;
    - a repeated flag token keeps collecting into the same entry.

    Returns
    - tuple[list[str], dict[str, list[str]]]
    """
    positionals = []
    tokens = {}
    words = positionals
    for item in argv:
        if not isinstance(item, str):
            raise TypeError("tokenize() argument must be an iterable of strings")
        if item.startswith("-") and len(item) > 1 and not re.fullmatch(r"-\d+(\.\d*)?", item):
            name, separator, inline = item.partition("=")
            words = tokens.setdefault(name, [])
            if separator:
                words.append(inline)
            continue
        words.append(item)
    return positionals, tokens


__all__ = (
    "Grammar",
    "coerce",
    "tokenize",
)
