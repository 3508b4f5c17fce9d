"""
Intermediate representation for luaassist: the expression AST and the
type model that deduction produces.
"""

from .ast import (
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    Expr,
    Identifier,
    LogicalExpression,
    MemberExpression,
    NamedTypeRef,
    NilLiteral,
    Node,
    NumericLiteral,
    Range,
    SetMetatable,
    StringCallExpression,
    StringLiteral,
    TableConstructorExpression,
    TableKey,
    TableKeyString,
    TableValue,
    UnaryExpression,
    VarargLiteral,
    member_path,
)
from .types import (
    ANY,
    BOOLEAN,
    NUMBER,
    STRING,
    LazyValue,
    LuaBasicType,
    LuaFunction,
    LuaModule,
    LuaTable,
    LuaType,
    Symbol,
    SymbolKind,
    TypeTag,
    is_any,
    is_boolean,
    is_function,
    is_lazy,
    is_module,
    is_number,
    is_string,
    is_table,
    type_rank,
)

__all__ = [
    # AST
    "BinaryExpression",
    "BooleanLiteral",
    "CallExpression",
    "Expr",
    "Identifier",
    "LogicalExpression",
    "MemberExpression",
    "NamedTypeRef",
    "NilLiteral",
    "Node",
    "NumericLiteral",
    "Range",
    "SetMetatable",
    "StringCallExpression",
    "StringLiteral",
    "TableConstructorExpression",
    "TableKey",
    "TableKeyString",
    "TableValue",
    "UnaryExpression",
    "VarargLiteral",
    "member_path",
    # Types
    "ANY",
    "BOOLEAN",
    "NUMBER",
    "STRING",
    "LazyValue",
    "LuaBasicType",
    "LuaFunction",
    "LuaModule",
    "LuaTable",
    "LuaType",
    "Symbol",
    "SymbolKind",
    "TypeTag",
    "is_any",
    "is_boolean",
    "is_function",
    "is_lazy",
    "is_module",
    "is_number",
    "is_string",
    "is_table",
    "type_rank",
]
