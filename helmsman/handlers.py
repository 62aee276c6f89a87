"""
Handlers and argument specifications.

Overview
- FlagSpec: one entry of a slot's flag table. Either POSITIONAL ("the next token is the
  value") or VALUE ("the flag alone supplies this value").
- ArgumentSpec: per-slot metadata (type tag, display name, flag table, default).
- Handler: a type-erased callable behind a uniform invoke(values) interface, plus its
  ordered ArgumentSpecs. One adapter is generated per handler; the tree stores only Handlers.

Values vs literals
- A str bound to a slot (from the command line, a value flag or a default) is a literal and
  goes through the conversion registry.
- Any other object is pre-typed and reaches the handler as-is.
"""
import inspect
from enum import Enum
from inspect import Parameter

from .conversions import Kind, canonical, describe
from .utils import Unset, mirror, ordinal, rename


class FlagKind(Enum):
    POSITIONAL = "positional"
    VALUE = "value"


class FlagSpec:
    __slots__ = ("kind", "value")

    def __init__(self, kind, /, value=Unset):
        if not isinstance(kind, FlagKind):
            raise TypeError("flag kind must be a FlagKind")
        if kind is FlagKind.POSITIONAL and value is not Unset:
            raise TypeError("positional flags take their value from the next token")
        if kind is FlagKind.VALUE and value is Unset:
            raise TypeError("value flags require a value")
        self.kind = kind
        self.value = value

    @classmethod
    def positional(cls):
        return cls(FlagKind.POSITIONAL)

    @classmethod
    def valued(cls, value, /):
        return cls(FlagKind.VALUE, value)

    @property
    def requires_value(self):
        return self.kind is FlagKind.POSITIONAL

    def __eq__(self, other):
        if not isinstance(other, FlagSpec):
            return NotImplemented
        return (self.kind, self.value) == (other.kind, other.value)

    def __hash__(self):
        return hash(self.kind)

    def __repr__(self):
        if self.requires_value:
            return "FlagSpec.positional()"
        return "FlagSpec.valued(%r)" % (self.value,)


def strip_dashes(token, /):
    """flag text without its leading dashes ('--verbose' -> 'verbose')."""
    return token.lstrip("-")


def is_flag(token, /):
    """a token with one or more leading dashes addresses a slot by flag."""
    return token.startswith("-")


class ArgumentSpec:
    """
    metadata for one declared argument position.

    - tag: selects the converter used for string literals.
    - name: optional display name used in diagnostics.
    - flags: flag text (no dashes) -> FlagSpec.
    - default: Unset when none was registered; None is a real default.
    """

    tag = mirror("tag")
    name = mirror("name")
    flags = mirror("flags")

    def __init__(self, tag=Kind.STRING, /, name=Unset, default=Unset):
        self._tag = canonical(tag)
        self._name = name
        self._flags = {}
        self._default = default

    @property
    def default(self):
        return self._default

    @property
    def has_default(self):
        return self._default is not Unset

    def set_default(self, value, /):
        self._default = value

    def add_flag(self, text, flag, /):
        if not isinstance(text, str):
            raise TypeError("flag text must be a string")
        if not (text := strip_dashes(text)):
            raise ValueError("flag text must contain more than dashes")
        if not isinstance(flag, FlagSpec):
            raise TypeError("flag must be a FlagSpec")
        self._flags[text] = flag

    def label(self, index, /):
        """display label for diagnostics ("second argument 'y'", or "second argument" when unnamed)."""
        if self._name is not Unset:
            return "%s argument %r" % (ordinal(index + 1), self._name)
        return "%s argument" % ordinal(index + 1)

    def __repr__(self):
        parts = [describe(self._tag)]
        if self._name is not Unset:
            parts.append("name=%r" % self._name)
        if self._flags:
            parts.append("flags=%r" % sorted(self._flags))
        if self._default is not Unset:
            parts.append("default=%r" % (self._default,))
        return "%s(%s)" % (type(self).__name__, ", ".join(parts))


def _signature(callback):
    try:
        return inspect.signature(callback, eval_str=True)
    except NameError:
        return inspect.signature(callback)
    except (TypeError, ValueError):
        # builtins and some C callables expose no signature
        return None


def _positionals(signature):
    if signature is None:
        return []
    return [
        parameter for parameter in signature.parameters.values()
        if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
    ]


def _infer_specs(callback):
    signature = _signature(callback)
    if signature is None:
        raise TypeError("cannot infer argument types of %r; pass them explicitly" % (callback,))

    for parameter in signature.parameters.values():
        if parameter.kind is Parameter.VAR_POSITIONAL:
            raise TypeError("cannot infer the arity of %r (variadic positionals); pass tags explicitly" % (callback,))
        if parameter.kind is Parameter.KEYWORD_ONLY and parameter.default is Parameter.empty:
            raise TypeError("%r has a required keyword-only parameter %r" % (callback, parameter.name))

    specs = []
    for parameter in _positionals(signature):
        tag = Kind.STRING if parameter.annotation is Parameter.empty else parameter.annotation
        default = Unset if parameter.default is Parameter.empty else parameter.default
        specs.append(ArgumentSpec(tag, name=parameter.name, default=default))
    return specs


def _adapter(callback, arity, /):
    """generate the uniform invoke(values) entry point for one callback."""
    name = getattr(callback, "__name__", type(callback).__name__)

    @rename("invoke_%s" % name)
    def invoke(values, /):
        if len(values) != arity:
            raise TypeError("%s expects %d values, %d given" % (name, arity, len(values)))
        return callback(*values)

    return invoke


class Handler:
    """
    a callable bound to its ordered argument specs.

    build one with Handler.build(callback, tags); omitting tags infers them from the
    callback's positional parameters (annotations, with str for unannotated ones). Either way
    the names and defaults of the matching positional parameters become slot names and defaults.
    """

    specs = mirror("specs")

    def __init__(self, callback, specs, /):
        if not callable(callback):
            raise TypeError("handler must be callable")
        self._callback = callback
        self._specs = list(specs)
        self._invoke = _adapter(callback, len(self._specs))

    @classmethod
    def build(cls, callback, tags=Unset, /):
        if tags is Unset:
            return cls(callback, _infer_specs(callback))
        if isinstance(tags, str) or not hasattr(tags, "__iter__"):
            raise TypeError("handler tags must be an iterable of type tags")
        parameters = _positionals(_signature(callback))
        specs = []
        for index, tag in enumerate(tags):
            if index < len(parameters):
                parameter = parameters[index]
                default = Unset if parameter.default is Parameter.empty else parameter.default
                specs.append(ArgumentSpec(tag, name=parameter.name, default=default))
            else:
                specs.append(ArgumentSpec(tag))
        return cls(callback, specs)

    @property
    def callback(self):
        return self._callback

    @property
    def arity(self):
        return len(self._specs)

    def spec(self, index, /):
        return self._specs[index]

    def invoke(self, values, /):
        return self._invoke(tuple(values))

    def __repr__(self):
        name = getattr(self._callback, "__qualname__", repr(self._callback))
        return "%s(%s, %r)" % (type(self).__name__, name, self._specs)


__all__ = (
    "FlagKind",
    "FlagSpec",
    "ArgumentSpec",
    "Handler",
    "is_flag",
    "strip_dashes",
)
