# kshtool/glsl/ast.py
"""
Syntax tree produced by `kshtool.glsl.parser`.

Nodes are plain frozen dataclasses with no behaviour. Consumers walk the tree
with `isinstance` checks, one branch per node kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

# ----------------------------------------------------------------------
# Expressions
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str


@dataclass(frozen=True, slots=True)
class IntConst:
    value: int
    unsigned: bool = False


@dataclass(frozen=True, slots=True)
class FloatConst:
    value: float


@dataclass(frozen=True, slots=True)
class BoolConst:
    value: bool


@dataclass(frozen=True, slots=True)
class Unary:
    op: str  # "+", "-", "!", "~", "++", "--" (prefix forms)
    operand: Expr


@dataclass(frozen=True, slots=True)
class Binary:
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Ternary:
    condition: Expr
    then: Expr
    otherwise: Expr


@dataclass(frozen=True, slots=True)
class Assignment:
    target: Expr
    op: str  # "=", "+=", ...
    value: Expr


@dataclass(frozen=True, slots=True)
class Bracket:
    array: Expr
    index: Expr


@dataclass(frozen=True, slots=True)
class FunCall:
    """
    Function or constructor call.

    `callee` is the function name, or the type name for constructors.
    `method_of` is set for method-style calls such as `arr.length()`.
    """

    callee: str
    args: Tuple[Expr, ...]
    method_of: Optional[Expr] = None


@dataclass(frozen=True, slots=True)
class Dot:
    expr: Expr
    field: str


@dataclass(frozen=True, slots=True)
class PostInc:
    expr: Expr


@dataclass(frozen=True, slots=True)
class PostDec:
    expr: Expr


@dataclass(frozen=True, slots=True)
class Comma:
    left: Expr
    right: Expr


Expr = Union[
    Identifier,
    IntConst,
    FloatConst,
    BoolConst,
    Unary,
    Binary,
    Ternary,
    Assignment,
    Bracket,
    FunCall,
    Dot,
    PostInc,
    PostDec,
    Comma,
]

# ----------------------------------------------------------------------
# Types and declarations
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArraySpecifier:
    # None = unsized dimension, e.g. `float a[];`
    dimensions: Tuple[Optional[Expr], ...]


@dataclass(frozen=True, slots=True)
class StructField:
    type: TypeSpecifier
    names: Tuple[Tuple[str, Optional[ArraySpecifier]], ...]


@dataclass(frozen=True, slots=True)
class StructSpecifier:
    name: Optional[str]
    fields: Tuple[StructField, ...]


@dataclass(frozen=True, slots=True)
class TypeSpecifier:
    name: str  # basic type or struct name
    array: Optional[ArraySpecifier] = None
    struct: Optional[StructSpecifier] = None


@dataclass(frozen=True, slots=True)
class LayoutQualifier:
    ids: Tuple[Tuple[str, Optional[Expr]], ...]


@dataclass(frozen=True, slots=True)
class FullySpecifiedType:
    qualifiers: Tuple[Union[str, LayoutQualifier], ...]
    specifier: TypeSpecifier

    def has_qualifier(self, name: str) -> bool:
        return name in self.qualifiers


@dataclass(frozen=True, slots=True)
class SimpleInitializer:
    expr: Expr


@dataclass(frozen=True, slots=True)
class ListInitializer:
    items: Tuple[Initializer, ...]


Initializer = Union[SimpleInitializer, ListInitializer]


@dataclass(frozen=True, slots=True)
class Declarator:
    name: str
    array: Optional[ArraySpecifier] = None
    initializer: Optional[Initializer] = None


@dataclass(frozen=True, slots=True)
class InitDeclaratorList:
    """`uniform mat4 A, B[2];` and friends. `declarators` may be empty."""

    type: FullySpecifiedType
    declarators: Tuple[Declarator, ...]


@dataclass(frozen=True, slots=True)
class PrecisionDeclaration:
    precision: str
    type: TypeSpecifier


@dataclass(frozen=True, slots=True)
class BlockDeclaration:
    """Interface block such as `uniform Lights { vec4 color; } lights;`."""

    qualifiers: Tuple[Union[str, LayoutQualifier], ...]
    name: str
    fields: Tuple[StructField, ...]
    instance: Optional[Declarator] = None


@dataclass(frozen=True, slots=True)
class QualifierDeclaration:
    """`invariant gl_Position;` or a bare `layout(...) in;`."""

    qualifiers: Tuple[Union[str, LayoutQualifier], ...]
    names: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Parameter:
    type: FullySpecifiedType
    name: Optional[str] = None
    array: Optional[ArraySpecifier] = None


@dataclass(frozen=True, slots=True)
class FunctionPrototype:
    return_type: FullySpecifiedType
    name: str
    parameters: Tuple[Parameter, ...]


Declaration = Union[
    InitDeclaratorList,
    PrecisionDeclaration,
    BlockDeclaration,
    QualifierDeclaration,
    FunctionPrototype,
]

# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DeclarationStatement:
    declaration: Declaration


@dataclass(frozen=True, slots=True)
class ExpressionStatement:
    expr: Optional[Expr]  # None for a bare `;`


@dataclass(frozen=True, slots=True)
class Compound:
    statements: Tuple[Statement, ...]


@dataclass(frozen=True, slots=True)
class Selection:
    condition: Expr
    then: Statement
    otherwise: Optional[Statement] = None


@dataclass(frozen=True, slots=True)
class Switch:
    head: Expr
    body: Tuple[Statement, ...]


@dataclass(frozen=True, slots=True)
class CaseLabel:
    expr: Optional[Expr]  # None for `default:`


@dataclass(frozen=True, slots=True)
class ExprCondition:
    expr: Expr


@dataclass(frozen=True, slots=True)
class DeclCondition:
    """`while (bool keep = next())`."""

    type: FullySpecifiedType
    name: str
    initializer: Initializer


Condition = Union[ExprCondition, DeclCondition]


@dataclass(frozen=True, slots=True)
class While:
    condition: Condition
    body: Statement


@dataclass(frozen=True, slots=True)
class DoWhile:
    body: Statement
    condition: Expr


@dataclass(frozen=True, slots=True)
class For:
    init: Statement  # DeclarationStatement or ExpressionStatement
    condition: Optional[Condition]
    post: Optional[Expr]
    body: Statement


@dataclass(frozen=True, slots=True)
class Return:
    expr: Optional[Expr] = None


@dataclass(frozen=True, slots=True)
class Jump:
    keyword: str  # "break", "continue", "discard"


Statement = Union[
    DeclarationStatement,
    ExpressionStatement,
    Compound,
    Selection,
    Switch,
    CaseLabel,
    While,
    DoWhile,
    For,
    Return,
    Jump,
]

# ----------------------------------------------------------------------
# Translation unit
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Directive:
    text: str


@dataclass(frozen=True, slots=True)
class FunctionDefinition:
    prototype: FunctionPrototype
    body: Compound


ExternalDeclaration = Union[Directive, Declaration, FunctionDefinition]


@dataclass(frozen=True, slots=True)
class TranslationUnit:
    declarations: Tuple[ExternalDeclaration, ...]
