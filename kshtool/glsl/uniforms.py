# kshtool/glsl/uniforms.py
"""
Uniform liveness for a single shader stage.

A uniform is live when its name appears anywhere in the code reachable from a
function body. The check is purely syntactic: no data flow, no dead-branch
elimination, no preprocessor evaluation.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from kshtool.codec.variable import Variable, VariableType
from kshtool.errors import ParseError, UnsupportedType
from kshtool.glsl import ast
from kshtool.glsl.lexer import GlslSyntaxError
from kshtool.glsl.parser import parse

log = logging.getLogger(__name__)


def parse_stage(source: str, stage: str = "<shader>") -> ast.TranslationUnit:
    try:
        return parse(source)
    except GlslSyntaxError as e:
        raise ParseError(f"{stage}:{e}") from e


# ----------------------------------------------------------------------
# Declarations
# ----------------------------------------------------------------------


MAX_ARRAY_LENGTH = 0xFFFFFFFF  # Stored as a u32.


def _constant_dimension(
    array: Optional[ast.ArraySpecifier], name: str
) -> Optional[int]:
    if array is None or not array.dimensions:
        return None
    first = array.dimensions[0]
    if not isinstance(first, ast.IntConst):
        return None
    if first.value > MAX_ARRAY_LENGTH:
        raise UnsupportedType(
            f"Uniform {name} has array size {first.value}, "
            f"the container allows at most {MAX_ARRAY_LENGTH}"
        )
    return first.value


def collect_uniform_declarations(unit: ast.TranslationUnit) -> List[Variable]:
    uniforms: List[Variable] = []
    for decl in unit.declarations:
        if not isinstance(decl, ast.InitDeclaratorList):
            continue
        if not decl.type.has_qualifier("uniform"):
            continue

        spec = decl.type.specifier
        for declarator in decl.declarators:
            try:
                var_type = VariableType.from_glsl(spec.name)
            except UnsupportedType:
                raise UnsupportedType(
                    f"Uniform {declarator.name} has unsupported type {spec.name}"
                ) from None

            array_length = _constant_dimension(declarator.array, declarator.name)
            if array_length is None:
                array_length = _constant_dimension(spec.array, declarator.name)

            uniforms.append(
                Variable(
                    name=declarator.name,
                    type=var_type,
                    array_length=array_length,
                )
            )
    return uniforms


# ----------------------------------------------------------------------
# Usage
# ----------------------------------------------------------------------


def collect_used_identifiers(unit: ast.TranslationUnit) -> Set[str]:
    used: Set[str] = set()
    for decl in unit.declarations:
        if isinstance(decl, ast.FunctionDefinition):
            for stmt in decl.body.statements:
                walk_statement(stmt, used)
    return used


def _reject_assignment(expr: ast.Expr) -> None:
    if isinstance(expr, ast.Assignment):
        raise UnsupportedType(
            "Assignment used as a condition is not supported"
        )


def walk_condition(condition: ast.Condition, used: Set[str]) -> None:
    if isinstance(condition, ast.ExprCondition):
        _reject_assignment(condition.expr)
        walk_expr(condition.expr, used)
    elif isinstance(condition, ast.DeclCondition):
        raise UnsupportedType(
            f"Declaration of {condition.name} used as a condition is not supported"
        )


def walk_initializer(init: ast.Initializer, used: Set[str]) -> None:
    if isinstance(init, ast.SimpleInitializer):
        walk_expr(init.expr, used)
    elif isinstance(init, ast.ListInitializer):
        for item in init.items:
            walk_initializer(item, used)


def walk_statement(stmt: ast.Statement, used: Set[str]) -> None:
    if isinstance(stmt, ast.DeclarationStatement):
        decl = stmt.declaration
        if isinstance(decl, ast.InitDeclaratorList):
            for declarator in decl.declarators:
                if declarator.initializer is not None:
                    walk_initializer(declarator.initializer, used)

    elif isinstance(stmt, ast.ExpressionStatement):
        if stmt.expr is not None:
            walk_expr(stmt.expr, used)

    elif isinstance(stmt, ast.Compound):
        for child in stmt.statements:
            walk_statement(child, used)

    elif isinstance(stmt, ast.Selection):
        _reject_assignment(stmt.condition)
        walk_expr(stmt.condition, used)
        walk_statement(stmt.then, used)
        if stmt.otherwise is not None:
            walk_statement(stmt.otherwise, used)

    elif isinstance(stmt, ast.Switch):
        walk_expr(stmt.head, used)
        for child in stmt.body:
            walk_statement(child, used)

    elif isinstance(stmt, ast.CaseLabel):
        if stmt.expr is not None:
            walk_expr(stmt.expr, used)

    elif isinstance(stmt, ast.While):
        walk_condition(stmt.condition, used)
        walk_statement(stmt.body, used)

    elif isinstance(stmt, ast.DoWhile):
        walk_statement(stmt.body, used)
        _reject_assignment(stmt.condition)
        walk_expr(stmt.condition, used)

    elif isinstance(stmt, ast.For):
        walk_statement(stmt.init, used)
        if stmt.condition is not None:
            walk_condition(stmt.condition, used)
        if stmt.post is not None:
            walk_expr(stmt.post, used)
        walk_statement(stmt.body, used)

    elif isinstance(stmt, ast.Return):
        if stmt.expr is not None:
            walk_expr(stmt.expr, used)

    # Jump (break/continue/discard) mentions nothing.


def walk_expr(expr: ast.Expr, used: Set[str]) -> None:
    if isinstance(expr, ast.Identifier):
        used.add(expr.name)

    elif isinstance(expr, ast.Unary):
        walk_expr(expr.operand, used)

    elif isinstance(expr, ast.Binary):
        walk_expr(expr.left, used)
        walk_expr(expr.right, used)

    elif isinstance(expr, ast.Ternary):
        walk_expr(expr.condition, used)
        walk_expr(expr.then, used)
        walk_expr(expr.otherwise, used)

    elif isinstance(expr, ast.Assignment):
        walk_expr(expr.target, used)
        walk_expr(expr.value, used)

    elif isinstance(expr, ast.Bracket):
        walk_expr(expr.array, used)
        walk_expr(expr.index, used)

    elif isinstance(expr, ast.FunCall):
        if expr.method_of is not None:
            walk_expr(expr.method_of, used)
        for arg in expr.args:
            walk_expr(arg, used)

    elif isinstance(expr, ast.Dot):
        walk_expr(expr.expr, used)

    elif isinstance(expr, (ast.PostInc, ast.PostDec)):
        walk_expr(expr.expr, used)

    elif isinstance(expr, ast.Comma):
        walk_expr(expr.left, used)
        walk_expr(expr.right, used)

    # Literals mention nothing.


# ----------------------------------------------------------------------
# Public entry points
# ----------------------------------------------------------------------


def filter_live(
    declared: Iterable[Variable], used: Set[str]
) -> List[Variable]:
    return [var for var in declared if var.name in used]


def declared_uniforms(source: str, stage: str = "<shader>") -> List[Variable]:
    return collect_uniform_declarations(parse_stage(source, stage))


def used_identifiers(source: str, stage: str = "<shader>") -> Set[str]:
    return collect_used_identifiers(parse_stage(source, stage))


def live_uniforms(source: str, stage: str = "<shader>") -> List[Variable]:
    """
    Uniforms of one stage that are referenced from code, in declaration order.
    Declared-but-unused uniforms are dropped silently.
    """
    unit = parse_stage(source, stage)
    declared = collect_uniform_declarations(unit)
    live = filter_live(declared, collect_used_identifiers(unit))

    dropped = len(declared) - len(live)
    if dropped:
        log.debug("%s: dropped %d unused uniforms", stage, dropped)
    return live
