"""
Command tree: nodes keyed by alias sets, stored in a single arena.

Layout
- Every CommandNode lives in CommandTree's node list; children and parents are referenced
  by index. The root is node 0 and has no aliases. Dropping the tree drops every node.
- A node is identified among its siblings by its alias set (insertion ordered); no two
  children of the same node share an alias.

Traversal
- traverse_full(path): strict, PathNotFoundError on the first unmatched segment.
- traverse_partial(tokens): walks while tokens match children and are not flag-like,
  returning (node, index) where index is the path/argument boundary.

Matching is exact and case-sensitive; child order is insertion order.
"""
import logging

from .faults import PathNotFoundError
from .handlers import is_flag
from .utils import Unset, mirror

logger = logging.getLogger(__name__)


def _segments(path, /):
    if isinstance(path, str):
        raise TypeError("path must be a sequence of tokens, not a string")
    path = tuple(path)
    for segment in path:
        if not isinstance(segment, str):
            raise TypeError("path segments must be strings, got %s" % type(segment).__name__)
    return path


class CommandNode:
    """
    one position in the command tree.

    public state
    - aliases / children: read-only views (children are arena indices).
    - handler: the Handler attached here, or None for intermediate nodes.
    - command_message / command_callback: custom unknown-command diagnostics for this node.
    - args_message / args_callback: custom invalid-arguments diagnostics for this node.
    """

    aliases = mirror("aliases")
    children = mirror("children")

    def __init__(self, index, /, aliases=(), parent=None):
        self._index = index
        self._aliases = list(aliases)
        self._children = []
        self._parent = parent
        self.handler = None
        self.command_message = Unset
        self.command_callback = Unset
        self.args_message = Unset
        self.args_callback = Unset

    @property
    def index(self):
        return self._index

    @property
    def parent(self):
        return self._parent

    @property
    def name(self):
        """the first alias (the token the node was created with); None for the root."""
        return self._aliases[0] if self._aliases else None

    def matches(self, token, /):
        return token in self._aliases

    def __repr__(self):
        return "%s(index=%d, aliases=%r, handler=%r)" % (
            type(self).__name__, self._index, self._aliases, self.handler
        )


class CommandTree:
    def __init__(self):
        self._nodes = [CommandNode(0)]

    @property
    def root(self):
        return self._nodes[0]

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(tuple(self._nodes))

    def node(self, index, /):
        return self._nodes[index]

    def child(self, node, token, /):
        """the child of node whose alias set contains token, or None."""
        for index in node._children:
            if (candidate := self._nodes[index]).matches(token):
                return candidate
        return None

    def tokens(self, node, /):
        """every legal child token of node (all aliases), in insertion order."""
        return [alias for index in node._children for alias in self._nodes[index]._aliases]

    def route(self, node, /):
        """the primary-alias path leading from the root to node."""
        names = []
        while node.parent is not None:
            names.append(node.name)
            node = self._nodes[node.parent]
        return tuple(reversed(names))

    def drill(self, path, /):
        """walk path from the root, creating missing nodes, and return the last one."""
        node = self.root
        for segment in _segments(path):
            if (child := self.child(node, segment)) is None:
                child = CommandNode(len(self._nodes), (segment,), parent=node.index)
                self._nodes.append(child)
                node._children.append(child.index)
            node = child
        return node

    def register(self, path, handler, /):
        """attach handler at path (overwriting any previous one) and return the node."""
        node = self.drill(path)
        if node.handler is not None:
            logger.debug("overwriting handler at %r", " ".join(self.route(node)))
        node.handler = handler
        return node

    def traverse_full(self, path, /):
        path = _segments(path)
        node = self.root
        for segment in path:
            if (node := self.child(node, segment)) is None:
                raise PathNotFoundError(path, segment)
        return node

    def traverse_partial(self, tokens, /):
        node = self.root
        index = 0
        for index, token in enumerate(tokens):
            if is_flag(token) or (child := self.child(node, token)) is None:
                return node, index
            node = child
        else:
            index = len(tokens)
        return node, index

    def add_alias(self, path, alias, /):
        """
        add alias to the node at path.

        errors
        - PathNotFoundError when path does not resolve (the root cannot be aliased).
        - ValueError when a sibling already answers to alias.
        """
        path = _segments(path)
        if not isinstance(alias, str):
            raise TypeError("alias must be a string")
        if not path:
            raise PathNotFoundError(path)
        node = self.traverse_full(path)
        if node.matches(alias):
            return node
        parent = self._nodes[node.parent]
        if (sibling := self.child(parent, alias)) is not None:
            raise ValueError("alias %r is already used by %r" % (alias, " ".join(self.route(sibling))))
        node._aliases.append(alias)
        return node


__all__ = (
    "CommandNode",
    "CommandTree",
)
