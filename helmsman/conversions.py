"""
Helmsman conversions: turn raw string literals into typed slot values.

What this module provides
- Kind: the built-in type tags (32-bit integer, 32-bit float, 64-bit float, string).
- ConversionRegistry: a mutable tag -> converter mapping. Any hashable object can be a tag
  (a Kind, a class, a plain string) once a converter is registered for it.

Built-ins are installed explicitly with install_defaults(); a registry starts empty so that
no hidden global state leaks between dispatchers.

Quick example
    >>> registry = ConversionRegistry().install_defaults()
    >>> registry.convert(Kind.INT32, "42")
    42
    >>> @registry.register("point")
    ... def to_point(literal):
    ...     x, y = literal.split(",")
    ...     return int(x), int(y)
"""
import logging
import re
import struct
from enum import Enum

from .faults import ConversionError, FaultCode, getdoc
from .utils import Unset, rename

logger = logging.getLogger(__name__)

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+", re.ASCII)


class Kind(Enum):
    """built-in type tags understood by every fresh dispatcher."""
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


# Python types accepted in place of the built-in tags (used for annotation inference).
_ALIASES = {
    int: Kind.INT32,
    float: Kind.FLOAT64,
    str: Kind.STRING,
}


def canonical(tag, /):
    """map a Python type alias onto its built-in Kind; any other tag is returned unchanged."""
    try:
        return _ALIASES.get(tag, tag)
    except TypeError:  # unhashable
        return tag


def describe(tag, /):
    """short, readable label for a tag in messages."""
    tag = canonical(tag)
    if isinstance(tag, Kind):
        return tag.value
    if isinstance(tag, type):
        return tag.__qualname__
    return str(tag)


@rename("int32")
def to_int32(literal, /):
    if not isinstance(literal, str) or not _DECIMAL.fullmatch(literal):
        raise ValueError("invalid decimal integer: %r" % (literal,))
    value = int(literal)
    if not INT32_MIN <= value <= INT32_MAX:
        raise OverflowError("%d does not fit in 32 bits" % value)
    return value


@rename("float32")
def to_float32(literal, /):
    # struct.pack raises OverflowError for finite values beyond single precision
    return struct.unpack("f", struct.pack("f", float(literal)))[0]


@rename("float64")
def to_float64(literal, /):
    return float(literal)


@rename("string")
def to_string(literal, /):
    if not isinstance(literal, str):
        raise TypeError("string literal expected, got %s" % type(literal).__name__)
    return literal


class ConversionRegistry:
    """
    type tag -> (str -> value) converter table.

    The registry stays mutable for its whole lifetime: converters can be registered,
    overwritten or removed between executions, and binding only consults it when a
    slot actually needs a conversion.
    """

    def __init__(self):
        self._converters = {}

    def install_defaults(self):
        """register the built-in Kind converters (overwriting any previous ones) and return self."""
        self._converters[Kind.INT32] = to_int32
        self._converters[Kind.FLOAT32] = to_float32
        self._converters[Kind.FLOAT64] = to_float64
        self._converters[Kind.STRING] = to_string
        return self

    def register(self, tag, convert=Unset, /):
        """
        insert or overwrite the converter for a tag.

        forms
        - register(tag, convert) -> convert
        - @register(tag) decorator form
        """
        if convert is Unset:
            return rename(lambda convert, /: self.register(tag, convert), "register")
        if not callable(convert):
            raise TypeError("conversion for %s must be callable" % describe(tag))
        logger.debug("registering conversion for %s", describe(tag))
        self._converters[canonical(tag)] = convert
        return convert

    def unregister(self, tag, /):
        try:
            del self._converters[canonical(tag)]
        except KeyError:
            raise KeyError(tag) from None

    def lookup(self, tag, /):
        """return the converter registered for tag (KeyError when missing)."""
        return self._converters[canonical(tag)]

    def convert(self, tag, literal, /):
        """
        convert a literal with the converter registered for tag.

        errors
        - ConversionError when no converter is registered for the tag.
        - ConversionError when the converter raises any Exception (ValueError, KeyError,
          IndexError, custom errors...); that exception is chained as __cause__.
        """
        try:
            convert = self.lookup(tag)
        except (KeyError, TypeError):
            raise ConversionError(
                "no conversion is registered for type %r" % describe(tag),
                title="unknown type",
                code=FaultCode.CONVERSION_FAILURE,
                tag=tag,
                input=literal,
                hint="register one with add_conversion(%s, ...)" % describe(tag),
                docs=getdoc(FaultCode.CONVERSION_FAILURE),
            ) from None
        try:
            return convert(literal)
        except Exception as exception:
            raise ConversionError(
                "cannot convert %r to %s" % (literal, describe(tag)),
                title="conversion failure",
                code=FaultCode.CONVERSION_FAILURE,
                tag=tag,
                input=literal,
                reason=str(exception),
                hint="pass a valid %s value" % describe(tag),
                docs=getdoc(FaultCode.CONVERSION_FAILURE),
            ) from exception

    def __contains__(self, tag):
        try:
            return canonical(tag) in self._converters
        except TypeError:
            return False

    def __len__(self):
        return len(self._converters)

    def __iter__(self):
        return iter(tuple(self._converters))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(describe, self._converters)))


__all__ = (
    "Kind",
    "ConversionRegistry",
    "canonical",
    "describe",
    "INT32_MIN",
    "INT32_MAX",
)
