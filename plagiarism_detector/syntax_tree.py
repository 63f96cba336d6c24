"""Abstract syntax tree and its obfuscation-resistant canonical hash.

Every node kind has a fixed integer tag. A node's canonical hash depends only
on its tag, its children's hashes and (for operators and types) a string hash
of the operator or type name. Identifier and literal payloads never reach the
hash, so renaming a variable or changing a constant leaves every subtree hash
unchanged.

Binary expressions are canonicalized on the hash values of their operands:
commutative operators sort the operand hashes, relational operators swap the
operands and mirror the operator when the left hash is the larger one.

``for`` loops hash as their ``while`` lowering::

    for (init; cond; incr) body    ==>    init; while (cond) { body; incr; }

so a block containing a ``for`` loop hashes exactly like the block with the
hand-written ``while`` version.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Hashing constants
# ---------------------------------------------------------------------------
HASH_BASE_1 = 31
HASH_BASE_2 = 37  # string hashing only
HASH_MODULUS = 1_000_000_007

COMMUTATIVE_OPERATORS = frozenset({"+", "*", "==", "!=", "&&", "||", "&", "|", "^"})
MIRRORED_RELATIONAL_OPERATORS = {"<": ">", ">": "<", "<=": ">=", ">=": "<="}


def combine_hashes(h1: int, h2: int) -> int:
    return (h1 * HASH_BASE_1 + h2) % HASH_MODULUS


def hash_string(text: str) -> int:
    h = 0
    power = 1
    for ch in text:
        h = (h + ord(ch) * power) % HASH_MODULUS
        power = (power * HASH_BASE_2) % HASH_MODULUS
    return h


class NodeKind(IntEnum):
    PROGRAM = 0
    FUNCTION_DEFINITION = 1
    VARIABLE_DECLARATION = 2
    IF_STATEMENT = 3
    WHILE_STATEMENT = 4
    FOR_STATEMENT = 5
    RETURN_STATEMENT = 6
    EXPRESSION_STATEMENT = 7
    BLOCK_STATEMENT = 8
    BINARY_EXPRESSION = 9
    UNARY_EXPRESSION = 10
    FUNCTION_CALL = 11
    IDENTIFIER = 12
    NUMBER_LITERAL = 13
    STRING_LITERAL = 14
    CHAR_LITERAL = 15
    PARAMETER = 16
    TYPE = 17


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------
@dataclass
class Node:
    """Base class. Subclasses list their children in declaration order."""

    kind: ClassVar[NodeKind]

    def children(self) -> Iterator["Node"]:
        return iter(())

    def clone(self) -> "Node":
        """Independent deep copy; hashes identically to ``self``.

        Copies bottom-up from an explicit pre-order list, so arbitrarily
        deep trees (long else-if chains) do not hit the recursion limit.
        """
        order: List[Node] = []
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            order.append(node)
            stack.extend(node.children())

        copies: Dict[int, Node] = {}
        for node in reversed(order):
            changes = {}
            for f in fields(node):
                value = getattr(node, f.name)
                if isinstance(value, Node):
                    changes[f.name] = copies[id(value)]
                elif isinstance(value, list):
                    changes[f.name] = [copies[id(item)] for item in value]
            copies[id(node)] = replace(node, **changes)
        return copies[id(self)]


@dataclass
class Identifier(Node):
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER
    name: str = "IDENTIFIER"


@dataclass
class NumberLiteral(Node):
    kind: ClassVar[NodeKind] = NodeKind.NUMBER_LITERAL
    value: str = "NUMBER_LITERAL"


@dataclass
class StringLiteral(Node):
    kind: ClassVar[NodeKind] = NodeKind.STRING_LITERAL
    value: str = "STRING_LITERAL"


@dataclass
class CharLiteral(Node):
    kind: ClassVar[NodeKind] = NodeKind.CHAR_LITERAL
    value: str = "CHAR_LITERAL"


LEAF_TYPES = (Identifier, NumberLiteral, StringLiteral, CharLiteral)


@dataclass
class Type(Node):
    kind: ClassVar[NodeKind] = NodeKind.TYPE
    name: str = "int"


@dataclass
class Parameter(Node):
    kind: ClassVar[NodeKind] = NodeKind.PARAMETER
    type: Type
    identifier: Identifier

    def children(self) -> Iterator[Node]:
        yield self.type
        yield self.identifier


@dataclass
class BinaryExpression(Node):
    kind: ClassVar[NodeKind] = NodeKind.BINARY_EXPRESSION
    left: Node
    operator: str
    right: Node

    def children(self) -> Iterator[Node]:
        yield self.left
        yield self.right


@dataclass
class UnaryExpression(Node):
    """Prefix or postfix operator application. ``postfix`` is not hashed."""

    kind: ClassVar[NodeKind] = NodeKind.UNARY_EXPRESSION
    operator: str
    operand: Node
    postfix: bool = False

    def children(self) -> Iterator[Node]:
        yield self.operand


@dataclass
class FunctionCall(Node):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION_CALL
    callee: Node
    arguments: List[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield self.callee
        yield from self.arguments


@dataclass
class ExpressionStatement(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION_STATEMENT
    expression: Node

    def children(self) -> Iterator[Node]:
        yield self.expression


@dataclass
class Block(Node):
    kind: ClassVar[NodeKind] = NodeKind.BLOCK_STATEMENT
    statements: List[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield from self.statements


@dataclass
class VariableDeclaration(Node):
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DECLARATION
    type: Type
    identifier: Identifier
    initializer: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        yield self.type
        yield self.identifier
        if self.initializer is not None:
            yield self.initializer


@dataclass
class If(Node):
    kind: ClassVar[NodeKind] = NodeKind.IF_STATEMENT
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        yield self.condition
        yield self.then_branch
        if self.else_branch is not None:
            yield self.else_branch


@dataclass
class While(Node):
    """``condition`` is only ever None for a lowered ``for (;;)`` loop."""

    kind: ClassVar[NodeKind] = NodeKind.WHILE_STATEMENT
    condition: Optional[Node]
    body: Node

    def children(self) -> Iterator[Node]:
        if self.condition is not None:
            yield self.condition
        yield self.body


@dataclass
class For(Node):
    """C-style loop. ``initializer`` is a VariableDeclaration or a bare expression."""

    kind: ClassVar[NodeKind] = NodeKind.FOR_STATEMENT
    initializer: Optional[Node]
    condition: Optional[Node]
    increment: Optional[Node]
    body: Node

    def children(self) -> Iterator[Node]:
        for child in (self.initializer, self.condition, self.increment, self.body):
            if child is not None:
                yield child


@dataclass
class Return(Node):
    kind: ClassVar[NodeKind] = NodeKind.RETURN_STATEMENT
    expression: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        if self.expression is not None:
            yield self.expression


@dataclass
class FunctionDefinition(Node):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION_DEFINITION
    return_type: Type
    identifier: Identifier
    parameters: List[Parameter]
    body: Block

    def children(self) -> Iterator[Node]:
        yield self.return_type
        yield self.identifier
        yield from self.parameters
        yield self.body


@dataclass
class Program(Node):
    kind: ClassVar[NodeKind] = NodeKind.PROGRAM
    declarations: List[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield from self.declarations


# ---------------------------------------------------------------------------
# for -> while lowering
# ---------------------------------------------------------------------------
def initializer_statement(loop: For) -> Optional[Node]:
    """The loop initializer as a standalone statement (cloned), if any."""
    if loop.initializer is None:
        return None
    if isinstance(loop.initializer, VariableDeclaration):
        return loop.initializer.clone()
    return ExpressionStatement(loop.initializer.clone())


def lower_for_loop(loop: For) -> Tuple[Optional[Node], While]:
    """Build ``(init_statement, while_loop)`` equivalent to ``loop``.

    The result is assembled from clones; ``loop`` is left untouched. A body
    that is already a block is flattened into the new block rather than
    nested, and the increment becomes the block's last statement.
    """
    if isinstance(loop.body, Block):
        statements = [stmt.clone() for stmt in loop.body.statements]
    else:
        statements = [loop.body.clone()]
    if loop.increment is not None:
        statements.append(ExpressionStatement(loop.increment.clone()))
    condition = loop.condition.clone() if loop.condition is not None else None
    return initializer_statement(loop), While(condition, Block(statements))


# ---------------------------------------------------------------------------
# Canonical hashing
# ---------------------------------------------------------------------------
class CanonicalHasher:
    """Memoizing canonical hasher.

    Hashes are computed post-order from an explicit stack, so tree depth is
    not bounded by the interpreter's recursion limit. The memo holds a
    reference to every node it has hashed so that ``id`` values cannot be
    recycled while the hasher is alive. Use one instance per traversal.
    """

    def __init__(self) -> None:
        self._memo: Dict[int, Tuple[Node, int]] = {}
        # for loop id -> hashes of its [init_stmt, while] lowering
        self._lowered: Dict[int, List[int]] = {}

    def hash(self, node: Node) -> int:
        stack: List[Tuple[Node, bool]] = [(node, False)]
        while stack:
            current, ready = stack.pop()
            if self._known(current):
                continue
            if ready:
                self._memo[id(current)] = (current, self._compute(current))
                continue
            stack.append((current, True))
            for dependency in self._dependencies(current):
                if not self._known(dependency):
                    stack.append((dependency, False))
        return self._value(node)

    def _known(self, node: Node) -> bool:
        hit = self._memo.get(id(node))
        return hit is not None and hit[0] is node

    def _value(self, node: Node) -> int:
        return self._memo[id(node)][1]

    @staticmethod
    def _dependencies(node: Node) -> List[Node]:
        if isinstance(node, For):
            # The lowering reads the body's statements, never the body block.
            parts = [p for p in (node.initializer, node.condition, node.increment) if p is not None]
            if isinstance(node.body, Block):
                return parts + node.body.statements
            return parts + [node.body]
        return list(node.children())

    def _compute(self, node: Node) -> int:
        if isinstance(node, LEAF_TYPES):
            return int(node.kind)
        if isinstance(node, Type):
            return combine_hashes(int(node.kind), hash_string(node.name))
        if isinstance(node, BinaryExpression):
            return self._binary(node)
        if isinstance(node, UnaryExpression):
            h = combine_hashes(int(node.kind), hash_string(node.operator))
            return combine_hashes(h, self._value(node.operand))
        if isinstance(node, Block):
            return self._fold(int(node.kind), self._block_items(node.statements))
        if isinstance(node, For):
            return self._for(node)
        return self._fold(int(node.kind), [self._value(child) for child in node.children()])

    @staticmethod
    def _fold(seed: int, hashes: List[int]) -> int:
        h = seed
        for value in hashes:
            h = combine_hashes(h, value)
        return h

    def _binary(self, node: BinaryExpression) -> int:
        left = self._value(node.left)
        right = self._value(node.right)
        op = node.operator
        if op in COMMUTATIVE_OPERATORS:
            left, right = sorted((left, right))
        elif op in MIRRORED_RELATIONAL_OPERATORS and left > right:
            left, right = right, left
            op = MIRRORED_RELATIONAL_OPERATORS[op]
        h = combine_hashes(int(node.kind), hash_string(op))
        h = combine_hashes(h, left)
        return combine_hashes(h, right)

    def _block_items(self, statements: List[Node]) -> List[int]:
        # A for loop inside a block contributes its initializer and its
        # while lowering as two sibling statements.
        hashes: List[int] = []
        for stmt in statements:
            if isinstance(stmt, For):
                hashes.extend(self._lowered[id(stmt)])
            else:
                hashes.append(self._value(stmt))
        return hashes

    def _lowered_for(self, loop: For) -> List[int]:
        """Hashes of ``lower_for_loop(loop)`` without building the clones."""
        body = loop.body.statements if isinstance(loop.body, Block) else [loop.body]
        block_items = self._block_items(body)
        if loop.increment is not None:
            block_items.append(
                combine_hashes(int(NodeKind.EXPRESSION_STATEMENT), self._value(loop.increment))
            )
        while_items = [] if loop.condition is None else [self._value(loop.condition)]
        while_items.append(self._fold(int(NodeKind.BLOCK_STATEMENT), block_items))
        while_hash = self._fold(int(NodeKind.WHILE_STATEMENT), while_items)

        if loop.initializer is None:
            return [while_hash]
        init_hash = self._value(loop.initializer)
        if not isinstance(loop.initializer, VariableDeclaration):
            init_hash = combine_hashes(int(NodeKind.EXPRESSION_STATEMENT), init_hash)
        return [init_hash, while_hash]

    def _for(self, loop: For) -> int:
        lowered = self._lowered_for(loop)
        self._lowered[id(loop)] = lowered
        if len(lowered) == 1:
            return lowered[0]
        # Outside a block, init + while hash as the block that would hold them.
        return self._fold(int(NodeKind.BLOCK_STATEMENT), lowered)


def canonical_hash(node: Node) -> int:
    """Canonical structural hash of ``node``, in ``[0, HASH_MODULUS)``."""
    return CanonicalHasher().hash(node)


# ---------------------------------------------------------------------------
# Debug dump
# ---------------------------------------------------------------------------
FOR_PARTS = ("initializer", "condition", "increment", "body")


def _label(node: Node) -> str:
    label = node.kind.name
    if isinstance(node, Identifier):
        label += f": {node.name}"
    elif isinstance(node, (NumberLiteral, StringLiteral, CharLiteral)):
        label += f": {node.value}"
    elif isinstance(node, Type):
        label += f": {node.name}"
    elif isinstance(node, BinaryExpression):
        label += f" [{node.operator}]"
    elif isinstance(node, UnaryExpression):
        label += f" [{node.operator}{' postfix' if node.postfix else ''}]"
    return label


def format_tree(node: Optional[Node], indent: int = 0) -> str:
    """Indented, one-node-per-line rendering of a tree."""
    lines: List[str] = []
    # Entries are (node, depth) or a preformatted heading line.
    stack: list = [(node, indent)]
    while stack:
        entry = stack.pop()
        if isinstance(entry, str):
            lines.append(entry)
            continue
        current, depth = entry
        pad = "  " * depth
        if current is None:
            lines.append(f"{pad}(none)\n")
            continue
        lines.append(f"{pad}{_label(current)}\n")
        if isinstance(current, For):
            for name in reversed(FOR_PARTS):
                stack.append((getattr(current, name), depth + 2))
                stack.append(f"{pad}  {name}:\n")
            continue
        stack.extend((child, depth + 1) for child in reversed(list(current.children())))
    return "".join(lines)
