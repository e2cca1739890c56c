r"""
Argot argument descriptors.

Overview
- Kind: the tagged variant every descriptor carries.
  • SINGLE_VALUE_OPTION: named option, one value, later occurrences overwrite.
  • MULTI_VALUE_OPTION: named option, every occurrence appends a value.
  • FLAG_OPTION: valueless option toggled by on-names and off-names.
  • SINGLE_VALUE_PARAMETER: positional, consumes one token.
  • MULTI_VALUE_PARAMETER: positional, consumes every remaining token.

- Argument: one immutable descriptor class for all kinds. Fields that do not
  apply to a kind are empty (names/on_names/off_names) or None.

- Factories
  • option(...), multi_option(...), flag(...): named descriptors.
  • parameter(...), multi_parameter(...): positional descriptors.

- Free functions over the variant
  • name(x): canonical display name ("-i", "--iterations", "outputfile").
  • key(x): identity key used for equality and hashing.
  • short_names(x) / long_names(x): single- and multi-character names.
  • is_on(x, name): whether a flag name is one of its on-names.
  • label(x): the name shown in the usage message's PARAMETERS section.

Metadata (sanitized on construction)
- names: one or more non-empty strings that do not start with "-" and do not
  repeat. Short names are one character long; long names are longer.
- on_names/off_names (flags): disjoint sets, not both empty.
- value_name: non-empty placeholder shown in usage (valued kinds only).
- description: a string, shown in usage.
- convert: a type tag, a registered builtin type, or any callable.

Violations raise SpecificationError: they are bugs in the declaring program.

Quick example:
    >>> from argot.arguments import option, flag, parameter
    >>> iterations = option(["i", "iterations"], "n", "Total iterations", convert="int")
    >>> verbose = flag(["v", "verbose"], ["q", "quiet"], "Be chatty (or not)")
    >>> output = parameter("outputfile", "Output file to which to write.")
"""
import builtins
import enum
import functools
import operator
import re
from collections.abc import Iterable

from .converters import convert_flag, resolve
from .faults import SpecificationError
from .utils import *


class Kind(enum.Enum):
    SINGLE_VALUE_OPTION = "single-value option"
    MULTI_VALUE_OPTION = "multi-value option"
    FLAG_OPTION = "flag option"
    SINGLE_VALUE_PARAMETER = "single-value parameter"
    MULTI_VALUE_PARAMETER = "multi-value parameter"

    @property
    def option(self):
        return self in (Kind.SINGLE_VALUE_OPTION, Kind.MULTI_VALUE_OPTION, Kind.FLAG_OPTION)

    @property
    def parameter(self):
        return not self.option

    @property
    def multiple(self):
        """Whether repeated values accumulate instead of overwriting."""
        return self in (Kind.MULTI_VALUE_OPTION, Kind.MULTI_VALUE_PARAMETER)

    @property
    def valued(self):
        """Whether the descriptor binds a converted string value."""
        return self is not Kind.FLAG_OPTION


# Fields shown by __rich_repr__ per kind (the rest are empty for that kind).
_DISPLAYABLE = {
    Kind.SINGLE_VALUE_OPTION: ("kind", "names", "value_name", "description", "convert"),
    Kind.MULTI_VALUE_OPTION: ("kind", "names", "value_name", "description", "convert"),
    Kind.FLAG_OPTION: ("kind", "on_names", "off_names", "description", "convert"),
    Kind.SINGLE_VALUE_PARAMETER: ("kind", "value_name", "description", "optional", "convert"),
    Kind.MULTI_VALUE_PARAMETER: ("kind", "value_name", "description", "optional", "convert"),
}


class ArgumentType(type):
    """
    Metaclass that turns descriptors into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      using mirror().
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Seal the resulting class against subclassing: the kind tag carries the
      variant, not the class hierarchy.
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
            for name in _DISPLAYABLE[self.kind]:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _names(cls, names, /):
    """
    Internal: normalize a single name or an iterable of names into a tuple.
    """
    if isinstance(names, str):
        return (names,)
    if not isinstance(names, Iterable):
        raise SpecificationError(f"{cls.__typename__} names must be a string or an iterable of strings.")
    return tuple(names)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate shared metadata (the description) in place.
    """
    if not isinstance(description := metadata["description"], str):
        raise SpecificationError(f"{cls.__typename__} description must be a string.")
    metadata["description"] = description.strip()


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the names of an option-like descriptor.

    Responsibilities
    - every name is a non-empty string that does not start with "-".
    - no name appears twice in the same descriptor.
    - for flags, on-names and off-names are disjoint and not both empty; the
      combined names are on-names followed by off-names.
    """
    if metadata["kind"] is Kind.FLAG_OPTION:
        on_names = _names(cls, metadata["on_names"])
        off_names = _names(cls, metadata["off_names"])
        if overlap := set(on_names) & set(off_names):
            raise SpecificationError(
                'Flag name "%s" cannot be both an on-name and an off-name.' % sorted(overlap)[0]
            )
        metadata["on_names"] = on_names
        metadata["off_names"] = off_names
        names = on_names + off_names
    else:
        names = _names(cls, metadata["names"])

    if not names:
        raise SpecificationError(f"{metadata["kind"].value.capitalize()} must specify at least one name.")

    seen = set()
    for name in names:
        if not isinstance(name, str):
            raise SpecificationError(f"{cls.__typename__} names must be strings.")
        elif not name:
            raise SpecificationError("Empty option name.")
        elif name.startswith("-"):
            raise SpecificationError('Option name "%s" must not start with "-".' % name)
        elif name in seen:
            raise SpecificationError('Option name "%s" is already in use.' % name)
        seen.add(name)

    metadata["names"] = names


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate metadata for descriptors that carry a converted value.

    - value_name: non-empty string after trimming.
    - convert: resolved through the converter registry.
    """
    if not isinstance(value_name := metadata["value_name"], str):
        raise SpecificationError(f"{cls.__typename__} value name must be a string.")
    elif not (value_name := value_name.strip()):
        raise SpecificationError(f"{metadata["kind"].value.capitalize()} value name cannot be empty.")
    metadata["value_name"] = value_name
    metadata["convert"] = resolve(coalesce(metadata["convert"], "string"))


class Argument(metaclass=ArgumentType):
    """
    Immutable descriptor for an option or a positional parameter.

    The descriptor holds no parse state: values bound during a parse live in
    the ParseResult returned for that parse, keyed by the descriptor. Two
    descriptors are equal when they share a kind and a key, so a descriptor
    rebuilt from the same declaration finds the same value in a result.

    Prefer the factories (option, multi_option, flag, parameter,
    multi_parameter) over calling the class directly.
    """

    __introspectable__ = (
        "kind",
        "names",
        "on_names",
        "off_names",
        "value_name",
        "description",
        "optional",
        "convert",
    )

    def __new__(
            cls,
            kind,
            /,
            names=(),
            *,
            on_names=(),
            off_names=(),
            value_name=Unset,
            description="",
            optional=False,
            convert=Unset,
    ):
        if not isinstance(kind, Kind):
            raise SpecificationError(f"{cls.__typename__} kind must be a Kind member.")

        metadata = {
            "kind": kind,
            "names": names,
            "on_names": on_names,
            "off_names": off_names,
            "value_name": value_name,
            "description": description,
            "optional": bool(optional),
            "convert": convert,
        }
        _sanitize_metadata(cls, metadata)
        if kind.option:
            _sanitize_named_metadata(cls, metadata)
        else:
            metadata["names"] = ()
        if kind.valued:
            _sanitize_valued_metadata(cls, metadata)
        else:
            metadata["value_name"] = None
            if not callable(convert := coalesce(metadata["convert"], convert_flag)):
                raise SpecificationError("Flag converter must be a callable.")
            metadata["convert"] = convert
        if kind is not Kind.FLAG_OPTION:
            metadata["on_names"] = metadata["off_names"] = ()
        if kind.option:
            # Options are never required; the attribute only speaks for parameters.
            metadata["optional"] = None

        self = super().__new__(cls)
        # Mirror sanitized metadata into private fields; read-only properties expose them.
        for field, value in metadata.items():
            builtins.object.__setattr__(self, "_" + field, value)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def __eq__(self, other, /):
        if not isinstance(other, Argument):
            return NotImplemented
        return self.kind is other.kind and key(self) == key(other)

    def __hash__(self):
        return hash((self.kind, key(self)))

    def __str__(self):
        return "%s %s" % ("option" if self.kind.option else "parameter", name(self))


def key(argument, /):
    """
    Return the identity key of a descriptor.

    - options: the tuple of names, in declaration order.
    - flags: on-names joined by "|", then "!", then off-names joined by "|".
    - parameters: the value name.
    """
    match argument.kind:
        case Kind.FLAG_OPTION:
            return "|".join(argument.on_names) + "!" + "|".join(argument.off_names)
        case Kind.SINGLE_VALUE_OPTION | Kind.MULTI_VALUE_OPTION:
            return argument.names
        case _:
            return argument.value_name


def _prefixed(name, /):
    return ("-" if len(name) == 1 else "--") + name


def name(argument, /):
    """
    Return the canonical display name of a descriptor.

    Options use their first name (for flags, the first on-name, else the first
    off-name), prefixed with "-" when it is one character long and "--"
    otherwise. Parameters use their value name.
    """
    if argument.kind.parameter:
        return argument.value_name
    return _prefixed(argument.names[0])


def short_names(argument, /):
    return tuple(name for name in argument.names if len(name) == 1)


def long_names(argument, /):
    return tuple(name for name in argument.names if len(name) > 1)


def is_on(argument, name, /):
    """
    Whether 'name' (without hyphens) switches the flag on.

    On-names take priority, although the disjointness invariant means a name
    is never both.
    """
    return name in argument.on_names


def label(argument, /):
    """
    Return the usage label of a parameter: "[name]" when optional, with a
    trailing " ..." when it takes multiple values.
    """
    label = argument.value_name
    if argument.kind is Kind.MULTI_VALUE_PARAMETER:
        label += " ..."
    if argument.optional:
        label = "[" + label + "]"
    return label


def option(names, value_name, description="", convert="string"):
    """
    Declare an option that takes a single value.

    Parameters
    - names: str | Iterable[str]
      One or more names without hyphens ("i", "iterations").
    - value_name: str
      Placeholder shown in the usage message ("n").
    - description: str
    - convert: type tag, registered builtin type, or callable(raw) -> value.

    Later occurrences on the command line overwrite earlier ones.
    """
    return Argument(
        Kind.SINGLE_VALUE_OPTION,
        names,
        value_name=value_name,
        description=description,
        convert=convert,
    )


def multi_option(names, value_name, description="", convert="string"):
    """
    Declare an option that may be given several times; every occurrence
    appends its converted value.
    """
    return Argument(
        Kind.MULTI_VALUE_OPTION,
        names,
        value_name=value_name,
        description=description,
        convert=convert,
    )


def flag(on_names, off_names=(), description="", convert=convert_flag):
    """
    Declare a valueless flag.

    Parameters
    - on_names: str | Iterable[str]
      Names that switch the flag on ("v", "verbose").
    - off_names: str | Iterable[str]
      Names that switch the flag off ("q", "quiet"). Must not overlap on_names.
    - description: str
    - convert: callable(on, previous) -> value
      Receives True for an on-name and False for an off-name, plus the value
      bound so far in the current parse (None when unbound). The default
      binds the boolean itself.
    """
    return Argument(
        Kind.FLAG_OPTION,
        on_names=on_names,
        off_names=off_names,
        description=description,
        convert=convert,
    )


def parameter(value_name, description="", optional=False, convert="string"):
    """
    Declare a positional parameter that consumes exactly one token.

    Once an optional parameter is declared, every later parameter must be
    optional too (enforced by the specification).
    """
    return Argument(
        Kind.SINGLE_VALUE_PARAMETER,
        value_name=value_name,
        description=description,
        optional=optional,
        convert=convert,
    )


def multi_parameter(value_name, description="", optional=False, convert="string"):
    """
    Declare a positional parameter that consumes every remaining token. It
    must be the last parameter of a specification.
    """
    return Argument(
        Kind.MULTI_VALUE_PARAMETER,
        value_name=value_name,
        description=description,
        optional=optional,
        convert=convert,
    )


__all__ = (
    # Variant tag and descriptor
    "Kind",
    "Argument",

    # Factories
    "option",
    "multi_option",
    "flag",
    "parameter",
    "multi_parameter",

    # Free functions over the variant
    "key",
    "name",
    "short_names",
    "long_names",
    "is_on",
    "label",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
