"""
Argument binding: raw trailing tokens -> typed slot values.

Passes
1. flags (left to right): '-x'/'--x' tokens are looked up across every slot's flag table.
   • value flag      → the slot takes the flag's value (one token consumed).
   • positional flag → the next token is the slot literal (two tokens consumed), whatever it
                        looks like, so '-y -5' binds '-5'.
   • unknown flag    → UnknownFlagError. The token is consumed and never falls through to
                        positional binding.
   A later flag for the same slot replaces an earlier one.
2. positionals: unconsumed tokens fill the first still-unbound slot, in order.
3. defaults: unbound slots take their registered default.
4. conversions: str bindings go through the registry; other objects are pre-typed.

Every pass runs even after a fault so the report names each failing slot; the faults are
bundled into a single ArgumentError by BindingResult.error().
"""
import logging
from enum import Enum

from .faults import (
    ArgumentError,
    ArityMismatchError,
    ConversionError,
    FaultCode,
    MissingFlagValueError,
    UnknownFlagError,
    getdoc,
)
from .handlers import is_flag, strip_dashes
from .utils import Unset, ordinal

logger = logging.getLogger(__name__)


class Source(Enum):
    LITERAL = "literal"
    FLAG = "flag"
    DEFAULT = "default"
    UNBOUND = "unbound"


class SlotBinding:
    """
    outcome for one slot.

    - source: where the raw object came from.
    - raw: the literal or pre-typed object (Unset when unbound).
    - value: the converted value (Unset until converted successfully).
    - converted: True/False after the conversion pass, None when it never got there.
    """
    __slots__ = ("source", "raw", "value", "converted")

    def __init__(self, source=Source.UNBOUND, raw=Unset, /):
        self.source = source
        self.raw = raw
        self.value = Unset
        self.converted = None

    @property
    def bound(self):
        return self.source is not Source.UNBOUND

    def __repr__(self):
        return "%s(%s, raw=%r, value=%r, converted=%r)" % (
            type(self).__name__, self.source.name, self.raw, self.value, self.converted
        )


class BindingResult:
    def __init__(self, bindings, faults, /):
        self._bindings = tuple(bindings)
        self._faults = tuple(faults)

    @property
    def bindings(self):
        return self._bindings

    @property
    def faults(self):
        return self._faults

    @property
    def ok(self):
        return not self._faults

    @property
    def values(self):
        if not self.ok:
            raise ValueError("binding failed; no values are available")
        return tuple(binding.value for binding in self._bindings)

    def error(self, **options):
        """the ArgumentError that reports every collected fault (None when binding succeeded)."""
        if self.ok:
            return None
        failed = sum(1 for binding in self._bindings if binding.converted is False)
        message = "%d problem%s while binding arguments" % (len(self._faults), "s" * (len(self._faults) != 1))
        if failed:
            message += " (%d slot%s failed to convert)" % (failed, "s" * (failed != 1))
        return ArgumentError(
            message,
            title="invalid arguments",
            code=FaultCode.INVALID_ARGUMENTS,
            faults=self._faults,
            bindings=self._bindings,
            docs=getdoc(FaultCode.INVALID_ARGUMENTS),
            **options,
        )

    def __len__(self):
        return len(self._bindings)

    def __iter__(self):
        return iter(self._bindings)

    def __getitem__(self, index):
        return self._bindings[index]


def _locate(specs, text):
    for index, spec in enumerate(specs):
        if (flag := spec._flags.get(text)) is not None:
            return index, flag
    return None


class ArgumentBinder:
    """binds tokens for one handler at a time against a shared ConversionRegistry."""

    def __init__(self, conversions, /):
        self._conversions = conversions

    def bind(self, specs, tokens, /, offset=0):
        """
        run the four passes and return a BindingResult.

        parameters
        - specs: ordered ArgumentSpecs (one per slot).
        - tokens: the trailing argument tokens.
        - offset: number of tokens preceding these in the request (for ordinal messages).
        """
        specs = tuple(specs)
        tokens = tuple(tokens)
        bindings = [SlotBinding() for _ in specs]
        consumed = [False] * len(tokens)
        faults = []

        def position(index):
            return ordinal(offset + index + 1)

        # flags
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if not is_flag(token):
                index += 1
                continue
            consumed[index] = True
            located = _locate(specs, text := strip_dashes(token))
            if located is None:
                known = sorted({"-" + flag for spec in specs for flag in spec._flags})
                faults.append(UnknownFlagError(
                    "unknown flag %r at %s position" % (token, position(index)),
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    input=token,
                    index=offset + index,
                    hint=("known flags: %s" % ", ".join(known)) if known else "this command takes no flags",
                    docs=getdoc(FaultCode.UNKNOWN_FLAG),
                ))
                index += 1
                continue
            slot, flag = located
            if not flag.requires_value:
                bindings[slot] = SlotBinding(Source.FLAG, flag.value)
                index += 1
                continue
            if index + 1 >= len(tokens):
                faults.append(MissingFlagValueError(
                    "flag %r at %s position requires a value" % (token, position(index)),
                    title="missing flag value",
                    code=FaultCode.MISSING_FLAG_VALUE,
                    input=token,
                    index=offset + index,
                    slot=slot,
                    hint="pass the value after the flag (for example: -%s <value>)" % text,
                    docs=getdoc(FaultCode.MISSING_FLAG_VALUE),
                ))
                index += 1
                continue
            consumed[index + 1] = True
            bindings[slot] = SlotBinding(Source.FLAG, tokens[index + 1])
            index += 2

        # positionals
        cursor = 0
        surplus = []
        for index, token in enumerate(tokens):
            if consumed[index]:
                continue
            while cursor < len(bindings) and bindings[cursor].bound:
                cursor += 1
            if cursor == len(bindings):
                surplus.append(index)
                continue
            bindings[cursor] = SlotBinding(Source.LITERAL, token)

        if surplus:
            faults.append(ArityMismatchError(
                "unexpected argument %r from %s position (expected at most %d)" % (
                    tokens[surplus[0]], position(surplus[0]), len(specs)
                ),
                title="too many arguments",
                code=FaultCode.ARITY_MISMATCH,
                input=tokens[surplus[0]],
                index=offset + surplus[0],
                tokens=tuple(tokens[index] for index in surplus),
                hint="remove %d extra argument%s" % (len(surplus), "s" * (len(surplus) != 1)),
                docs=getdoc(FaultCode.ARITY_MISMATCH),
            ))

        # defaults
        for slot, spec in enumerate(specs):
            if not bindings[slot].bound and spec.has_default:
                bindings[slot] = SlotBinding(Source.DEFAULT, spec.default)

        # conversions
        for slot, (spec, binding) in enumerate(zip(specs, bindings)):
            if not binding.bound:
                faults.append(ArityMismatchError(
                    "missing value for %s" % spec.label(slot),
                    title="missing argument",
                    code=FaultCode.ARITY_MISMATCH,
                    slot=slot,
                    hint="pass %d argument%s" % (len(specs), "s" * (len(specs) != 1)),
                    docs=getdoc(FaultCode.ARITY_MISMATCH),
                ))
                continue
            if not isinstance(binding.raw, str):
                binding.value = binding.raw
                binding.converted = True
                continue
            try:
                binding.value = self._conversions.convert(spec.tag, binding.raw)
            except ConversionError as fault:
                binding.converted = False
                faults.append(ConversionError(
                    "%s for %s" % (fault.message, spec.label(slot)),
                    **{**fault.options, "slot": slot},
                ))
            else:
                binding.converted = True

        logger.debug("bound %d slot(s) from %r with %d fault(s)", len(specs), tokens, len(faults))
        return BindingResult(bindings, faults)


__all__ = (
    "Source",
    "SlotBinding",
    "BindingResult",
    "ArgumentBinder",
)
