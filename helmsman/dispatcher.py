"""
Helmsman dispatcher: register commands on a tree and run them from tokens.

What this module provides
- Dispatcher: the façade over CommandTree, ConversionRegistry and ArgumentBinder.
  • Registration: register()/command(), add_alias(), add_positional_flag(), add_value_flag(),
    add_default(), add_conversion().
  • Diagnostics: set_invalid_command_message/func(), set_invalid_args_message/func(), scoped
    to a node (path) or dispatcher-wide (None).
  • Execution: execute(tokens) with path/argument boundary detection, and invoke(path,
    arguments) for callers that already split the two.
- State: per-call states; execute()/invoke() return the terminal one.

Execution flow
    RESOLVING_PATH → RESOLVED | UNRESOLVED → BINDING → BOUND | UNBOUND → EXECUTED

Diagnostic selection (exactly one fires per failure, most specific first)
1. node callback   2. node message   3. dispatcher callback   4. dispatcher message
5. built-in fault rendering (suggestions for unknown commands, per-slot report for arguments)

For path failures the node is the one where traversal stopped; for argument failures it is
the handler's node. Callbacks receive the fault and own the output; messages are printed
verbatim on the dispatcher console.

Quick start
    from helmsman import Dispatcher, Kind

    dispatcher = Dispatcher(name="calc")

    @dispatcher.command("math", "add")
    def add(x: int, y: int = 0):
        print(x + y)

    dispatcher.add_alias(["math", "add"], "plus")
    dispatcher.add_positional_flag(["math", "add"], 1, "-y")
    dispatcher.execute(["math", "plus", "-y", "20", "10"])  # 30

Errors
- User input never raises out of execute()/invoke(); it is reported and the call returns.
- Configuration misuse raises PathNotFoundError / IndexOutOfRangeError immediately.
- Exceptions raised by a handler itself propagate unchanged.
"""
import copy
import logging
from enum import Enum

from rich.text import Text

from .binder import ArgumentBinder
from .conversions import ConversionRegistry
from .faults import *
from .faults import console as _console
from .handlers import FlagSpec, Handler, is_flag
from .suggestions import DEFAULT_THRESHOLD, find_close
from .tree import CommandTree, _segments
from .utils import Unset, coalesce, ordinal, rename

logger = logging.getLogger(__name__)


class State(Enum):
    RESOLVING_PATH = "resolving-path"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    BINDING = "binding"
    BOUND = "bound"
    UNBOUND = "unbound"
    EXECUTED = "executed"

    @property
    def terminal(self):
        return self in (State.EXECUTED, State.UNRESOLVED, State.UNBOUND)


def _tokens(tokens):
    if isinstance(tokens, str):
        raise TypeError("tokens must be a sequence of strings, not a string")
    tokens = tuple(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("tokens must be strings, got %s" % type(token).__name__)
    return tokens


def _listing(tokens):
    return ", ".join(map(repr, tokens))


class Dispatcher:
    """
    command tree + conversions + binding behind one registration/execution API.

    options
    - name: program name shown in fault headers (overridden by __main__.__prog__).
    - console: rich Console receiving diagnostics (defaults to a stderr console).
    - colorful / fancy: styled text / panel chrome for built-in diagnostics.
    - threshold: maximum edit distance for command suggestions.
    """

    def __init__(self, /, name=Unset, console=Unset, *, colorful=False, fancy=False, threshold=DEFAULT_THRESHOLD):
        if name is not Unset and not isinstance(name, str):
            raise TypeError("dispatcher name must be a string")
        if not isinstance(threshold, int) or threshold < 0:
            raise ValueError("dispatcher threshold must be a non-negative integer")
        self._name = coalesce(name, None)
        self._console = coalesce(console, _console)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._threshold = threshold

        self._tree = CommandTree()
        self._conversions = ConversionRegistry().install_defaults()
        self._binder = ArgumentBinder(self._conversions)

        self._command_message = Unset
        self._command_callback = Unset
        self._args_message = Unset
        self._args_callback = Unset

    @property
    def name(self):
        return self._name

    @property
    def console(self):
        return self._console

    @property
    def tree(self):
        return self._tree

    @property
    def conversions(self):
        return self._conversions

    # --- registration ---

    def register(self, path, handler, tags=Unset, /):
        """
        attach handler at path, creating intermediate nodes and overwriting an existing handler.

        handler is either a Handler or a callable; for a callable, tags lists the type tag of each
        slot. When tags is omitted they are inferred from the callable's positional parameters.
        Unregistered tags are accepted here and only fail when a binding needs them.
        """
        if not isinstance(handler, Handler):
            handler = Handler.build(handler, tags)
        elif tags is not Unset:
            raise TypeError("tags cannot be combined with a prebuilt Handler")
        node = self._tree.register(path, handler)
        logger.debug("registered %r with %d slot(s)", " ".join(self._tree.route(node)), handler.arity)
        return handler

    def command(self, *path, tags=Unset):
        """decorator form of register(): @dispatcher.command("math", "add")."""

        def wrapper(callback, /):
            self.register(path, callback, tags)
            return callback

        return rename(wrapper, "command")

    def add_conversion(self, tag, convert=Unset, /):
        """register (or overwrite) the converter for tag; decorator form when convert is omitted."""
        return self._conversions.register(tag, convert)

    def add_alias(self, path, alias, /):
        self._tree.add_alias(path, alias)

    def _handler_node(self, path):
        node = self._tree.traverse_full(path)
        if node.handler is None:
            raise PathNotFoundError(path)
        return node

    def _slot(self, path, index):
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("slot index must be an integer")
        handler = self._handler_node(path).handler
        if not 0 <= index < handler.arity:
            raise IndexOutOfRangeError(path, index, handler.arity)
        return handler.spec(index)

    def add_positional_flag(self, path, index, flag, /):
        """the flag takes its value from the following token (e.g. '-y 20')."""
        self._slot(path, index).add_flag(flag, FlagSpec.positional())

    def add_value_flag(self, path, index, flag, value, /):
        """the flag alone supplies value (a str is converted like any literal; other objects are used as-is)."""
        self._slot(path, index).add_flag(flag, FlagSpec.valued(value))

    def add_default(self, path, index, value, /):
        self._slot(path, index).set_default(value)

    def _customize(self, path, attribute, value):
        if path is None:
            setattr(self, "_" + attribute, value)
        else:
            setattr(self._tree.traverse_full(path), attribute, value)

    def set_invalid_command_message(self, path, message, /):
        if not isinstance(message, str | Text):
            raise TypeError("invalid-command message must be a string")
        self._customize(path, "command_message", message)

    def set_invalid_command_func(self, path, callback, /):
        if not callable(callback):
            raise TypeError("invalid-command callback must be callable")
        self._customize(path, "command_callback", callback)

    def set_invalid_args_message(self, path, message, /):
        if not isinstance(message, str | Text):
            raise TypeError("invalid-arguments message must be a string")
        self._customize(path, "args_message", message)

    def set_invalid_args_func(self, path, callback, /):
        if not callable(callback):
            raise TypeError("invalid-arguments callback must be callable")
        self._customize(path, "args_callback", callback)

    # --- execution ---

    def execute(self, tokens, /):
        """
        resolve the longest registered prefix of tokens and run its handler with the rest.

        the path ends at the first token that is flag-like or matches no child; everything
        from there on is bound as arguments. Returns the terminal State.
        """
        tokens = _tokens(tokens)
        logger.debug("%s %r", State.RESOLVING_PATH.value, tokens)
        node, boundary = self._tree.traverse_partial(tokens)

        if node.handler is None:
            if boundary < len(tokens) and not is_flag(tokens[boundary]):
                return self._unresolved(node, boundary, tokens[boundary])
            return self._unresolved(node, boundary)

        return self._run(node, tokens[boundary:], boundary)

    def invoke(self, path, arguments=(), /):
        """run the handler at exactly path with arguments (no boundary detection)."""
        path = _segments(path)
        arguments = _tokens(arguments)
        logger.debug("%s %r", State.RESOLVING_PATH.value, path)

        node = self._tree.root
        for index, segment in enumerate(path):
            if (child := self._tree.child(node, segment)) is None:
                return self._unresolved(node, index, segment)
            node = child

        if node.handler is None:
            return self._unresolved(node, len(path))

        return self._run(node, arguments, len(path))

    def _run(self, node, arguments, offset):
        route = self._tree.route(node)
        logger.debug("%s %r (arguments start at %d)", State.RESOLVED.value, " ".join(route), offset)

        logger.debug("%s %r", State.BINDING.value, arguments)
        result = self._binder.bind(node.handler.specs, arguments, offset=offset)
        if not result.ok:
            logger.debug("%s: %d fault(s)", State.UNBOUND.value, len(result.faults))
            self._report(node, result.error(route=route, arguments=arguments), "args")
            return State.UNBOUND

        logger.debug("%s %r", State.BOUND.value, result.values)
        node.handler.invoke(result.values)
        logger.debug("%s %r", State.EXECUTED.value, " ".join(route))
        return State.EXECUTED

    def _unresolved(self, node, index, input=Unset):
        route = self._tree.route(node)
        commands = self._tree.tokens(node)
        where = " ".join(route) or "top level"

        if input is Unset:
            if commands:
                hint = "available commands: %s" % _listing(commands)
            else:
                hint = "no commands are available under %r" % where
            fault = HandlerMissingError(
                ("%r is not a complete command" % " ".join(route)) if route else "no command given",
                title="incomplete command",
                code=FaultCode.HANDLER_MISSING,
                index=index,
                route=route,
                commands=commands,
                suggestions=[],
                hint=hint,
                docs=getdoc(FaultCode.HANDLER_MISSING),
            )
        else:
            suggestions = find_close(commands, input, self._threshold)
            match len(suggestions):
                case 0 if commands:
                    hint = "available commands: %s" % _listing(commands)
                case 0:
                    hint = "no commands are available under %r" % where
                case 1:
                    hint = "most similar command: %r" % suggestions[0]
                case _:
                    hint = "similar commands: %s" % _listing(suggestions)
            fault = UnknownCommandError(
                "unknown command %r at %s position" % (input, ordinal(index + 1)),
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                input=input,
                index=index,
                route=route,
                commands=commands,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            )

        logger.debug("%s at %r: %s", State.UNRESOLVED.value, where, fault.message)
        self._report(node, fault, "command")
        return State.UNRESOLVED

    def _report(self, node, fault, kind):
        fault = copy.replace(
            fault,
            tool=self,
            console=self._console,
            colorful=self._colorful,
            fancy=self._fancy,
        )
        sources = (
            ("node callback", getattr(node, kind + "_callback"), True),
            ("node message", getattr(node, kind + "_message"), False),
            ("dispatcher callback", getattr(self, "_%s_callback" % kind), True),
            ("dispatcher message", getattr(self, "_%s_message" % kind), False),
        )
        for label, source, invocable in sources:
            if source is Unset:
                continue
            logger.debug("reporting %s through the %s", type(fault).__name__, label)
            if invocable:
                source(fault)
            else:
                self._console.print(source if isinstance(source, Text) else Text(source))
            return
        logger.debug("reporting %s through the built-in renderer", type(fault).__name__)
        trigger(fault)

    def __repr__(self):
        return "%s(name=%r, nodes=%d)" % (type(self).__name__, self._name, len(self._tree))


__all__ = (
    "State",
    "Dispatcher",
)
