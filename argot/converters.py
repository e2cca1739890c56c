"""
Built-in converters.

A value converter takes the raw command-line string and returns a typed
value, or raises ConversionError with a human-readable message. A flag
converter takes the on/off boolean plus the value already bound in the
current parse (None when unbound) and returns the value to bind.

Converters are pure and stateless; the same function may back any number of
descriptors and parses.

Registry
- CONVERTERS maps type tags ("byte", "short", "int", "long", "float",
  "double", "char", "string") and the builtins int/float/str to converters.
- resolve() turns a tag, a registered builtin or any other callable into the
  converter a descriptor will use.
"""
import re

from .faults import ConversionError, SpecificationError

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _parse_integer(raw, bits, /):
    if not _INTEGER.fullmatch(raw):
        raise ConversionError('Cannot convert argument "%s" to a number.' % raw)
    number = int(raw)
    # A literal that overflows the type is not a number of that type.
    if not -(1 << (bits - 1)) <= number < (1 << (bits - 1)):
        raise ConversionError('Cannot convert argument "%s" to a number.' % raw)
    return number


def convert_byte(raw, /):
    """
    Convert to an unsigned byte value in [0, 255].
    """
    if not _INTEGER.fullmatch(raw):
        raise ConversionError('Cannot convert argument "%s" to a number.' % raw)
    if not 0 <= (number := int(raw)) <= 255:
        raise ConversionError('"%s" results in a number that is too large for a byte' % raw)
    return number


def convert_short(raw, /):
    return _parse_integer(raw, 16)


def convert_int(raw, /):
    return _parse_integer(raw, 32)


def convert_long(raw, /):
    return _parse_integer(raw, 64)


def convert_float(raw, /):
    """
    Convert a plain decimal literal ("1.5", "-2", ".5", "1e3").

    Spellings float() also accepts (underscores, padding, "inf", "nan") are
    rejected like any other non-numeric input.
    """
    if not _DECIMAL.fullmatch(raw):
        raise ConversionError('Cannot convert argument "%s" to a number.' % raw)
    return float(raw)


# Python has a single binary64 float type.
convert_double = convert_float


def convert_char(raw, /):
    """
    Succeed only for strings of exactly one character.
    """
    if len(raw) != 1:
        raise ConversionError('Cannot parse "%s" to a character.' % raw)
    return raw


def convert_string(raw, /):
    return raw


def convert_flag(on, previous=None, /):
    """
    Default flag converter: bind True for an on-name and False for an off-name.
    """
    return on


CONVERTERS = {
    "byte": convert_byte,
    "short": convert_short,
    "int": convert_int,
    "long": convert_long,
    "float": convert_float,
    "double": convert_double,
    "char": convert_char,
    "string": convert_string,
    int: convert_long,
    float: convert_double,
    str: convert_string,
}


def resolve(convert, /):
    """
    Resolve a converter reference into a callable.

    Parameters
    - convert: a registry key (type tag or builtin type) or any callable.

    Raises
    - SpecificationError: when the tag is unknown or the object is not callable.
    """
    try:
        return CONVERTERS[convert]
    except KeyError:
        if isinstance(convert, str):
            raise SpecificationError('Unknown converter type "%s".' % convert) from None
    except TypeError:  # unhashable
        pass
    if not callable(convert):
        raise SpecificationError("Converter must be a type tag or a callable.")
    return convert


__all__ = (
    "convert_byte",
    "convert_short",
    "convert_int",
    "convert_long",
    "convert_float",
    "convert_double",
    "convert_char",
    "convert_string",
    "convert_flag",
    "CONVERTERS",
    "resolve",
)
