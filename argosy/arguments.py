r"""
Argosy argument declarations and metadata extraction.

Overview
- Argument: declarative metadata attached to a provider field. It is a data
  descriptor: reading it on an instance yields the bound value (or a fresh copy of
  its default), writing it stores the value on the instance.
- Argument.fromdoc(text): build the same declaration from a tag docstring:
    '''
    Tables to clean up
    @arg
    @var array
    @required
    '''
  Tag order does not matter and unknown tags are ignored.
- Descriptor: the derived, immutable record for one bindable field (switch,
  shorthand, type, mask, required, setter, description lines).
- extract(cls): walk a provider class and produce its ordered descriptors plus
  the free-text description of the class.

Metadata (sanitized on construction)
- type: Unset | str | type
  • strings are normalized case-insensitively (bool → boolean, int → integer,
    str → string, list → array); unknown names leave the field untyped.
  • python types bool/str/int/float/list/tuple map to the same names.
- required: bool
- mask: Unset | str, a wildcard pattern such as "--clean-*".
- default: any value (copied per instance so mutable defaults are not shared).
- descr: Unset | str (multi-line descriptions are kept line by line).
- setter: Unset | str | callable, preferred over plain assignment when binding.

Quick example:
    >>> from argosy import Provider, Argument
    >>> class Cleanup(Provider):
    ...     '''Clean caches'''
    ...     tables = Argument(list, required=True, descr="Tables to clean up")
    ...     cache = Argument(mask="--clean-*", descr="Caches to clean up")
    ...
    ...     def run_action(self): ...
"""
import copy
import inspect
import re
from types import MappingProxyType
from typing import NamedTuple

from .utils import *

# canonical declared types, keyed by every accepted (lowercased) spelling
_TYPENAMES = MappingProxyType({
    "boolean": "boolean",
    "bool": "boolean",
    "string": "string",
    "str": "string",
    "integer": "integer",
    "int": "integer",
    "float": "float",
    "double": "float",
    "array": "array",
    "list": "array",
})

_PYTYPES = MappingProxyType({
    bool: "boolean",
    str: "string",
    int: "integer",
    float: "float",
    list: "array",
    tuple: "array",
})

TYPES = frozenset(("boolean", "string", "integer", "float", "array", "mask", "untyped"))


def normalize(type, /):
    """
    Normalize a declared type (name or python type) into one of TYPES.

    Returns "untyped" for Unset, None, empty strings and unknown names, so a
    field typed with something exotic (e.g. "mixed") still binds its first word.
    """
    if type is Unset or type is None:
        return "untyped"
    if isinstance(type, str):
        return _TYPENAMES.get(type.strip().lower(), "untyped")
    try:
        return _PYTYPES.get(type, "untyped")
    except TypeError:  # unhashable
        return "untyped"


class Argument:
    """
    Declarative metadata for one provider field (the "tags" of the field).

    Instances are placed as class attributes on a Provider subclass. The provider
    metaclass collects them in declaration order and derives a Descriptor for
    each one. At runtime the Argument behaves like a plain attribute:
    - instance.field       → bound value, or a copy of the default
    - instance.field = v   → stores v on the instance
    - Provider.field       → the Argument itself (for introspection)

    Setters
    - Argument(setter="set_tables") names a provider method to call instead of
      assigning the attribute.
    - The decorator form binds a function directly:
        tables = Argument(list)

        @tables.setter
        def tables(self, value):
            self._tables = [table.strip() for table in value]
    - When neither is given, a provider method named set_<field> is used if the
      class defines one.
    """

    def __init__(
            self,
            type=Unset,
            /,
            *,
            required=False,
            mask=Unset,
            default=None,
            descr=Unset,
            setter=Unset,
    ):
        if not isinstance(type, str | UnsetType) and type is not None and type not in _PYTYPES:
            raise TypeError("argument 'type' must be a type name or one of bool, str, int, float, list")

        if not isinstance(mask, str | UnsetType):
            raise TypeError("argument 'mask' must be a string")
        # a mask is only effective with a non-empty pattern
        mask = mask.strip().lstrip("-") if isinstance(mask, str) else ""

        if not isinstance(descr, str | UnsetType):
            raise TypeError("argument 'descr' must be a string")

        if not (setter is Unset or isinstance(setter, str) or callable(setter)):
            raise TypeError("argument 'setter' must be a method name or a callable")

        self._type = "mask" if mask else normalize(type)
        self._required = bool(required)
        self._mask = mask or None
        self._default = default
        self._descr = tuple(inspect.cleandoc(descr).splitlines()) if isinstance(descr, str) else ()
        self._setter = coalesce(setter)
        self._name = None

    type = property(lambda self: self._type)
    required = property(lambda self: self._required)
    mask = property(lambda self: self._mask)
    default = property(lambda self: self._default)
    descr = property(lambda self: self._descr)
    name = property(lambda self: self._name)

    @classmethod
    def fromdoc(cls, text, /, default=None):
        r"""
        Build an Argument from a tag docstring, or return `default` unchanged.

        Lines starting with '@' are tags: '@arg' marks the field as an argument,
        '@var <type>' declares the type, '@required' makes it required and
        '@mask <pattern>' declares a wildcard family. Any other line is part of
        the description. Unknown tags are ignored and tag order is irrelevant.

        A docstring without '@arg' does not describe an argument: in that case
        `default` is returned so the field stays a plain class attribute.
        """
        if not isinstance(text, str):
            raise TypeError("fromdoc() argument must be a string")

        tags = {}
        descr = []
        for line in inspect.cleandoc(text).splitlines():
            if match := re.match(r"@(\S+)(.*)$", line.strip()):
                # first occurrence of a tag wins
                tags.setdefault(match[1], match[2].strip())
            elif line.strip():
                descr.append(line.rstrip())

        if "arg" not in tags:
            return default

        return cls(
            tags.get("var", Unset),
            required="required" in tags,
            mask=tags.get("mask", Unset),
            default=default,
            descr="\n".join(descr) if descr else Unset,
        )

    def setter(self, callback, /):
        """
        Decorator: bind `callback(instance, value)` as this field's setter.
        """
        if not callable(callback):
            raise TypeError("@setter must be applied to a callable")
        if self._setter is not None:
            raise TypeError("@setter must be applied only once")
        self._setter = callback
        return self

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self._name]
        except KeyError:
            value = instance.__dict__[self._name] = copy.copy(self._default)
            return value

    def __set__(self, instance, value):
        instance.__dict__[self._name] = value

    def __repr__(self):
        fields = {"name": self._name, "type": self._type, "required": self._required}
        if self._mask:
            fields["mask"] = self._mask
        return "argument(%s)" % ", ".join("%s=%r" % item for item in fields.items())


class Descriptor(NamedTuple):
    """
    Derived metadata record for one bindable field.

    Exactly one of `switch` (with an optional `shorthand`) or `mask`/`prefix` is
    populated. `index` is the stable position of the field in its provider; the
    parser keys its results by it.
    """
    index: int
    field: str
    switch: str | None
    shorthand: str | None
    setter: object
    type: str
    mask: str | None
    prefix: str | None
    required: bool
    descr: tuple

    @property
    def label(self):
        """
        switch column of the help listing: '-x [--name]', '--name' or '-mask, --mask'.
        """
        if self.mask:
            return "-%s, --%s" % (self.mask, self.mask)
        if self.shorthand:
            return "-%s [--%s]" % (self.shorthand, self.switch)
        return "--%s" % self.switch


def _resolve_setter(cls, argument, name):
    if callable(argument._setter):
        return argument._setter
    method = argument._setter if isinstance(argument._setter, str) else "set_" + name.lstrip("_")
    candidate = inspect.getattr_static(cls, method, None)
    if isinstance(argument._setter, str) and not callable(candidate):
        raise TypeError("argument %r setter %r is not a method of %s" % (name, method, cls.__name__))
    return getattr(cls, method) if callable(candidate) else None


def extract(cls, /):
    """
    Produce the ordered descriptors and the free-text description of a provider class.

    Ordering
    - fields of the most derived class come first, then those of its bases
      (following the MRO); a field redeclared in a subclass replaces the base one.

    Raises
    - TypeError when two fields derive the same switch name.
    """
    arguments = {}
    for klass in cls.__mro__:
        for name, object in vars(klass).items():
            if name in arguments:
                continue
            if isinstance(object, Argument):
                arguments[name] = object

    descriptors = []
    switches = {}
    for index, (name, argument) in enumerate(arguments.items()):
        switch = prefix = None

        if argument.mask:
            prefix = argument.mask.strip("*")
        else:
            switch = kebabize(name)
            if not switch:
                raise TypeError("argument %r does not derive a switch name" % name)
            if switch in switches:
                raise TypeError("arguments %r and %r derive the same switch '--%s'" % (switches[switch], name, switch))
            switches[switch] = name

        descriptors.append(Descriptor(
            index=index,
            field=name,
            switch=switch,
            shorthand=None,
            setter=_resolve_setter(cls, argument, name),
            type=argument.type,
            mask=argument.mask,
            prefix=prefix,
            required=argument.required,
            descr=argument.descr,
        ))

    doc = inspect.cleandoc(cls.__doc__) if isinstance(cls.__doc__, str) else ""
    description = [line for line in doc.splitlines() if not line.lstrip().startswith("@")]
    while description and not description[-1].strip():
        description.pop()
    return tuple(descriptors), tuple(description)


__all__ = (
    "Argument",
    "Descriptor",
    "TYPES",
    "normalize",
    "extract",
)
