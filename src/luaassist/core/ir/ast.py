"""
Lua expression AST consumed by the type interpreter.

The parser that produces these nodes is an external collaborator; this
module only fixes the node kinds the interpreter understands:

- Literals: strings, numbers, booleans, nil, varargs (``...``)
- Names: identifiers and named type references
- Operators: unary, binary, logical (``and`` / ``or``)
- Member access: ``a.b.c`` and ``a:b``
- Calls: ``f(x)`` and string-call sugar ``f "x"``
- Table constructors: ``{k = v, [expr] = v, v}``
- ``setmetatable`` links recorded by the scope builder

Nodes are immutable. The interpreter tracks evaluation state by node
identity, never on the nodes themselves.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Range = tuple[int, int]


class Node(BaseModel):
    """Base for all AST nodes."""

    range: Range | None = Field(default=None, description="Source offsets [start, end)")

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> str:
        """Syntactic kind tag, e.g. ``"CallExpression"``."""
        return type(self).__name__


# ---------------------------------------------------------------------------
# Literals and names
# ---------------------------------------------------------------------------


class StringLiteral(Node):
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


class NumericLiteral(Node):
    value: int | float

    def __str__(self) -> str:
        return str(self.value)


class BooleanLiteral(Node):
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class NilLiteral(Node):
    def __str__(self) -> str:
        return "nil"


class VarargLiteral(Node):
    """The ``...`` expression, bound to the enclosing function's varargs."""

    value: str = "..."

    def __str__(self) -> str:
        return self.value


class Identifier(Node):
    name: str

    def __str__(self) -> str:
        return self.name


class NamedTypeRef(Node):
    """Reference to a registered named type, independent of lexical scope."""

    name: str

    def __str__(self) -> str:
        return f"<{self.name}>"


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class UnaryExpression(Node):
    operator: str
    argument: Expr

    def __str__(self) -> str:
        sep = " " if self.operator == "not" else ""
        return f"{self.operator}{sep}{self.argument}"


class BinaryExpression(Node):
    operator: str
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


class LogicalExpression(Node):
    """``and`` / ``or`` expression."""

    operator: str
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


# ---------------------------------------------------------------------------
# Member access and calls
# ---------------------------------------------------------------------------


class MemberExpression(Node):
    """
    Field access ``base.identifier`` or method reference ``base:identifier``.

    Examples:
        - MemberExpression(base=Identifier("x"), identifier=Identifier("a")) → x.a
    """

    base: Expr
    identifier: Identifier
    indexer: str = "."

    def __str__(self) -> str:
        return f"{self.base}{self.indexer}{self.identifier}"


class CallExpression(Node):
    base: Expr
    arguments: list[Expr] = Field(default_factory=list)

    @property
    def args(self) -> list[Expr]:
        return self.arguments

    def __str__(self) -> str:
        return f"{self.base}({', '.join(str(a) for a in self.arguments)})"


class StringCallExpression(Node):
    """String-call sugar: ``require "mod"``."""

    base: Expr
    argument: StringLiteral

    @property
    def args(self) -> list[Expr]:
        return [self.argument]

    def __str__(self) -> str:
        return f"{self.base} {self.argument}"


# ---------------------------------------------------------------------------
# Table constructors
# ---------------------------------------------------------------------------


class TableKeyString(Node):
    """``name = value`` field."""

    key: Identifier
    value: Expr

    def __str__(self) -> str:
        return f"{self.key} = {self.value}"


class TableKey(Node):
    """``[key] = value`` field."""

    key: Expr
    value: Expr

    def __str__(self) -> str:
        return f"[{self.key}] = {self.value}"


class TableValue(Node):
    """Positional (array-style) field."""

    value: Expr

    def __str__(self) -> str:
        return str(self.value)


TableField = TableKeyString | TableKey | TableValue


class TableConstructorExpression(Node):
    fields: list[TableField] = Field(default_factory=list)

    def __str__(self) -> str:
        return "{" + ", ".join(str(f) for f in self.fields) + "}"


# ---------------------------------------------------------------------------
# Metatable links
# ---------------------------------------------------------------------------


class SetMetatable(Node):
    """
    A ``setmetatable(base, meta)`` statement recorded by the scope builder.

    Unlike the other nodes this one refers to already-declared symbols
    rather than sub-expressions.
    """

    base: Any = Field(description="Symbol whose table receives the metatable")
    meta: Any = Field(default=None, description="Symbol wrapping the metatable, if given")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __str__(self) -> str:
        meta = self.meta.name if self.meta is not None else "nil"
        return f"setmetatable({self.base.name}, {meta})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = (
    StringLiteral
    | NumericLiteral
    | BooleanLiteral
    | NilLiteral
    | VarargLiteral
    | Identifier
    | NamedTypeRef
    | UnaryExpression
    | BinaryExpression
    | LogicalExpression
    | MemberExpression
    | CallExpression
    | StringCallExpression
    | TableConstructorExpression
    | SetMetatable
)

# Rebuild models for recursive forward references
UnaryExpression.model_rebuild()
BinaryExpression.model_rebuild()
LogicalExpression.model_rebuild()
MemberExpression.model_rebuild()
CallExpression.model_rebuild()
StringCallExpression.model_rebuild()
TableKeyString.model_rebuild()
TableKey.model_rebuild()
TableValue.model_rebuild()
TableConstructorExpression.model_rebuild()


def member_path(node: Node) -> list[str] | None:
    """Flatten an identifier / member-access chain into its names.

    ``x.a.b`` → ``["x", "a", "b"]``. Returns None when the chain is rooted
    in anything other than a plain identifier (a call, a literal, ...).
    """
    if isinstance(node, Identifier):
        return [node.name]
    if isinstance(node, MemberExpression):
        head = member_path(node.base)
        if head is None:
            return None
        return [*head, node.identifier.name]
    return None

