# kshtool/glsl/parser.py
"""
Recursive-descent parser for the GLSL subset found in engine shaders.

Preprocessor directives are not evaluated. At file scope they become
`Directive` nodes; inside function bodies they are skipped, so every branch of
an `#if` block is parsed as ordinary code.
"""

from __future__ import annotations

from typing import List, Optional, Set, Tuple, Union

from kshtool.glsl import ast
from kshtool.glsl.lexer import (
    BASIC_TYPES,
    QUALIFIERS,
    SOFT_QUALIFIERS,
    GlslSyntaxError,
    Token,
    TokenKind,
    tokenize,
)

ASSIGNMENT_OPS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "<<=", ">>=", "&=", "|=", "^="}
)
UNARY_OPS = frozenset({"+", "-", "!", "~", "++", "--"})

# Higher binds tighter.
BINARY_PRECEDENCE = {
    "||": 1,
    "^^": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "<<": 9,
    ">>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
}

Qualifier = Union[str, ast.LayoutQualifier]


def parse(source: str) -> ast.TranslationUnit:
    """Parse a full shader. Raises GlslSyntaxError on malformed input."""
    return Parser(tokenize(source)).parse_translation_unit()


class Parser:
    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.struct_names: Set[str] = set()

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def tok(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind is not TokenKind.EOF:
            self.pos += 1
        return tok

    def at(self, text: str) -> bool:
        tok = self.tok
        return tok.text == text and tok.kind in (TokenKind.OP, TokenKind.KEYWORD)

    def accept(self, text: str) -> bool:
        if self.at(text):
            self.advance()
            return True
        return False

    def error(self, message: str, tok: Optional[Token] = None) -> GlslSyntaxError:
        tok = tok or self.tok
        found = tok.text if tok.kind is not TokenKind.EOF else "end of input"
        return GlslSyntaxError(f"{message}, found {found!r}", tok.line, tok.column)

    def expect(self, text: str) -> Token:
        if not self.at(text):
            raise self.error(f"expected {text!r}")
        return self.advance()

    def expect_ident(self) -> str:
        if self.tok.kind is not TokenKind.IDENT:
            raise self.error("expected identifier")
        return self.advance().text

    def skip_directives(self) -> None:
        while self.tok.kind is TokenKind.DIRECTIVE:
            self.advance()

    def is_type_name(self, tok: Token) -> bool:
        if tok.kind is TokenKind.KEYWORD:
            return tok.text in BASIC_TYPES or tok.text == "struct"
        return tok.kind is TokenKind.IDENT and tok.text in self.struct_names

    def is_qualifier(self, offset: int = 0) -> bool:
        tok = self.peek(offset)
        if tok.kind is TokenKind.KEYWORD:
            return tok.text in QUALIFIERS
        if tok.kind is not TokenKind.IDENT or tok.text not in SOFT_QUALIFIERS:
            return False
        # A soft qualifier only counts when a type or another qualifier follows.
        return self.is_type_name(self.peek(offset + 1)) or self.is_qualifier(
            offset + 1
        )

    # ------------------------------------------------------------------
    # File scope
    # ------------------------------------------------------------------

    def parse_translation_unit(self) -> ast.TranslationUnit:
        decls: List[ast.ExternalDeclaration] = []
        while self.tok.kind is not TokenKind.EOF:
            if self.tok.kind is TokenKind.DIRECTIVE:
                decls.append(ast.Directive(self.advance().text))
            elif self.accept(";"):
                continue
            else:
                decls.append(self.parse_declaration(allow_function_body=True))
        return ast.TranslationUnit(tuple(decls))

    def parse_declaration(
        self, allow_function_body: bool = False
    ) -> Union[ast.Declaration, ast.FunctionDefinition]:
        if self.accept("precision"):
            precision = self.advance()
            if precision.text not in ("highp", "mediump", "lowp"):
                raise self.error("expected precision qualifier", precision)
            spec = self.parse_type_specifier()
            self.expect(";")
            return ast.PrecisionDeclaration(precision.text, spec)

        qualifiers = self.parse_qualifiers()

        if qualifiers and not self.is_type_name(self.tok):
            if self.accept(";"):
                return ast.QualifierDeclaration(qualifiers, ())
            if self.tok.kind is TokenKind.IDENT and self.peek().text == "{":
                return self.parse_block(qualifiers)
            names = [self.expect_ident()]
            while self.accept(","):
                names.append(self.expect_ident())
            self.expect(";")
            return ast.QualifierDeclaration(qualifiers, tuple(names))

        full_type = ast.FullySpecifiedType(qualifiers, self.parse_type_specifier())
        if self.accept(";"):
            return ast.InitDeclaratorList(full_type, ())

        name = self.expect_ident()

        if self.at("("):
            prototype = ast.FunctionPrototype(
                full_type, name, self.parse_parameters()
            )
            if self.at("{"):
                if not allow_function_body:
                    raise self.error("function definition not allowed here")
                return ast.FunctionDefinition(prototype, self.parse_compound())
            self.expect(";")
            return prototype

        declarators = [self.parse_declarator_rest(name)]
        while self.accept(","):
            declarators.append(self.parse_declarator_rest(self.expect_ident()))
        self.expect(";")
        return ast.InitDeclaratorList(full_type, tuple(declarators))

    def parse_declarator_rest(self, name: str) -> ast.Declarator:
        array = self.parse_array_specifier()
        initializer = self.parse_initializer() if self.accept("=") else None
        return ast.Declarator(name, array, initializer)

    def parse_block(self, qualifiers: Tuple[Qualifier, ...]) -> ast.BlockDeclaration:
        name = self.expect_ident()
        fields = self.parse_struct_fields()
        instance = None
        if self.tok.kind is TokenKind.IDENT:
            instance = ast.Declarator(self.advance().text, self.parse_array_specifier())
        self.expect(";")
        return ast.BlockDeclaration(qualifiers, name, fields, instance)

    def parse_parameters(self) -> Tuple[ast.Parameter, ...]:
        self.expect("(")
        params: List[ast.Parameter] = []
        if self.at("void") and self.peek().text == ")":
            self.advance()
        while not self.at(")"):
            qualifiers = self.parse_qualifiers()
            full_type = ast.FullySpecifiedType(
                qualifiers, self.parse_type_specifier()
            )
            name = None
            array = None
            if self.tok.kind is TokenKind.IDENT:
                name = self.advance().text
                array = self.parse_array_specifier()
            params.append(ast.Parameter(full_type, name, array))
            if not self.accept(","):
                break
        self.expect(")")
        return tuple(params)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def parse_qualifiers(self) -> Tuple[Qualifier, ...]:
        qualifiers: List[Qualifier] = []
        while self.is_qualifier():
            if self.at("layout"):
                qualifiers.append(self.parse_layout())
            else:
                qualifiers.append(self.advance().text)
        return tuple(qualifiers)

    def parse_layout(self) -> ast.LayoutQualifier:
        self.expect("layout")
        self.expect("(")
        ids: List[Tuple[str, Optional[ast.Expr]]] = []
        while True:
            key = self.advance()
            if key.kind not in (TokenKind.IDENT, TokenKind.KEYWORD):
                raise self.error("expected layout qualifier", key)
            value = self.parse_conditional() if self.accept("=") else None
            ids.append((key.text, value))
            if not self.accept(","):
                break
        self.expect(")")
        return ast.LayoutQualifier(tuple(ids))

    def parse_type_specifier(self) -> ast.TypeSpecifier:
        tok = self.tok
        if self.at("struct"):
            struct = self.parse_struct()
            return ast.TypeSpecifier(
                struct.name or "", self.parse_array_specifier(), struct
            )
        if not self.is_type_name(tok):
            raise self.error("expected type name")
        self.advance()
        return ast.TypeSpecifier(tok.text, self.parse_array_specifier())

    def parse_struct(self) -> ast.StructSpecifier:
        self.expect("struct")
        name = None
        if self.tok.kind is TokenKind.IDENT:
            name = self.advance().text
            self.struct_names.add(name)
        return ast.StructSpecifier(name, self.parse_struct_fields())

    def parse_struct_fields(self) -> Tuple[ast.StructField, ...]:
        self.expect("{")
        fields: List[ast.StructField] = []
        while not self.accept("}"):
            self.skip_directives()
            if self.accept("}"):
                break
            self.parse_qualifiers()
            spec = self.parse_type_specifier()
            names = []
            while True:
                field_name = self.expect_ident()
                names.append((field_name, self.parse_array_specifier()))
                if not self.accept(","):
                    break
            self.expect(";")
            fields.append(ast.StructField(spec, tuple(names)))
        return tuple(fields)

    def parse_array_specifier(self) -> Optional[ast.ArraySpecifier]:
        dims: List[Optional[ast.Expr]] = []
        while self.accept("["):
            if self.accept("]"):
                dims.append(None)
                continue
            dims.append(self.parse_expression())
            self.expect("]")
        return ast.ArraySpecifier(tuple(dims)) if dims else None

    def parse_initializer(self) -> ast.Initializer:
        if self.accept("{"):
            items: List[ast.Initializer] = []
            while not self.at("}"):
                items.append(self.parse_initializer())
                if not self.accept(","):
                    break
            self.expect("}")
            return ast.ListInitializer(tuple(items))
        return ast.SimpleInitializer(self.parse_assignment())

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_compound(self) -> ast.Compound:
        self.expect("{")
        statements: List[ast.Statement] = []
        while True:
            self.skip_directives()
            if self.accept("}"):
                break
            if self.tok.kind is TokenKind.EOF:
                raise self.error("expected '}'")
            statements.append(self.parse_statement())
        return ast.Compound(tuple(statements))

    def is_declaration_start(self) -> bool:
        tok = self.tok
        if self.is_qualifier() or self.at("precision") or self.at("struct"):
            return True
        if self.is_type_name(tok):
            nxt = self.peek()
            return nxt.kind is TokenKind.IDENT or nxt.text == "["
        return False

    def parse_statement(self) -> ast.Statement:
        self.skip_directives()
        tok = self.tok

        if self.at("{"):
            return self.parse_compound()
        if self.accept(";"):
            return ast.ExpressionStatement(None)

        if tok.kind is TokenKind.KEYWORD:
            if tok.text == "if":
                self.advance()
                self.expect("(")
                condition = self.parse_expression()
                self.expect(")")
                then = self.parse_statement()
                otherwise = None
                self.skip_directives()
                if self.accept("else"):
                    otherwise = self.parse_statement()
                return ast.Selection(condition, then, otherwise)

            if tok.text == "switch":
                self.advance()
                self.expect("(")
                head = self.parse_expression()
                self.expect(")")
                return ast.Switch(head, self.parse_compound().statements)

            if tok.text == "case":
                self.advance()
                expr = self.parse_expression()
                self.expect(":")
                return ast.CaseLabel(expr)

            if tok.text == "default":
                self.advance()
                self.expect(":")
                return ast.CaseLabel(None)

            if tok.text == "while":
                self.advance()
                self.expect("(")
                condition = self.parse_condition()
                self.expect(")")
                return ast.While(condition, self.parse_statement())

            if tok.text == "do":
                self.advance()
                body = self.parse_statement()
                self.expect("while")
                self.expect("(")
                expr = self.parse_expression()
                self.expect(")")
                self.expect(";")
                return ast.DoWhile(body, expr)

            if tok.text == "for":
                return self.parse_for()

            if tok.text == "return":
                self.advance()
                expr = None if self.at(";") else self.parse_expression()
                self.expect(";")
                return ast.Return(expr)

            if tok.text in ("break", "continue", "discard"):
                self.advance()
                self.expect(";")
                return ast.Jump(tok.text)

        if self.is_declaration_start():
            decl = self.parse_declaration()
            return ast.DeclarationStatement(decl)  # type: ignore[arg-type]

        expr = self.parse_expression()
        self.expect(";")
        return ast.ExpressionStatement(expr)

    def parse_for(self) -> ast.For:
        self.expect("for")
        self.expect("(")

        init: ast.Statement
        if self.accept(";"):
            init = ast.ExpressionStatement(None)
        elif self.is_declaration_start():
            init = ast.DeclarationStatement(self.parse_declaration())  # type: ignore[arg-type]
        else:
            init = ast.ExpressionStatement(self.parse_expression())
            self.expect(";")

        condition = None if self.at(";") else self.parse_condition()
        self.expect(";")
        post = None if self.at(")") else self.parse_expression()
        self.expect(")")
        return ast.For(init, condition, post, self.parse_statement())

    def parse_condition(self) -> ast.Condition:
        if self.is_declaration_start():
            full_type = ast.FullySpecifiedType(
                self.parse_qualifiers(), self.parse_type_specifier()
            )
            name = self.expect_ident()
            self.expect("=")
            return ast.DeclCondition(full_type, name, self.parse_initializer())
        return ast.ExprCondition(self.parse_expression())

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    # Directives may also split an expression across lines; every point where
    # the next token is inspected skips them first.

    def parse_expression(self) -> ast.Expr:
        expr = self.parse_assignment()
        while self.accept(","):
            expr = ast.Comma(expr, self.parse_assignment())
        return expr

    def parse_assignment(self) -> ast.Expr:
        target = self.parse_conditional()
        self.skip_directives()
        if self.tok.kind is TokenKind.OP and self.tok.text in ASSIGNMENT_OPS:
            op = self.advance().text
            return ast.Assignment(target, op, self.parse_assignment())
        return target

    def parse_conditional(self) -> ast.Expr:
        condition = self.parse_binary(1)
        self.skip_directives()
        if self.accept("?"):
            then = self.parse_expression()
            self.expect(":")
            return ast.Ternary(condition, then, self.parse_assignment())
        return condition

    def parse_binary(self, min_precedence: int) -> ast.Expr:
        left = self.parse_unary()
        while True:
            self.skip_directives()
            tok = self.tok
            precedence = BINARY_PRECEDENCE.get(tok.text)
            if (
                tok.kind is not TokenKind.OP
                or precedence is None
                or precedence < min_precedence
            ):
                return left
            self.advance()
            left = ast.Binary(tok.text, left, self.parse_binary(precedence + 1))

    def parse_unary(self) -> ast.Expr:
        self.skip_directives()
        tok = self.tok
        if tok.kind is TokenKind.OP and tok.text in UNARY_OPS:
            self.advance()
            return ast.Unary(tok.text, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> ast.Expr:
        expr = self.parse_primary()
        while True:
            self.skip_directives()
            if self.accept("["):
                expr = ast.Bracket(expr, self.parse_expression())
                self.expect("]")
            elif self.accept("."):
                name = self.expect_ident()
                if self.at("("):
                    expr = ast.FunCall(name, self.parse_arguments(), method_of=expr)
                else:
                    expr = ast.Dot(expr, name)
            elif self.accept("++"):
                expr = ast.PostInc(expr)
            elif self.accept("--"):
                expr = ast.PostDec(expr)
            else:
                return expr

    def parse_arguments(self) -> Tuple[ast.Expr, ...]:
        self.expect("(")
        args: List[ast.Expr] = []
        if self.at("void") and self.peek().text == ")":
            self.advance()
        while True:
            self.skip_directives()
            if self.at(")"):
                break
            args.append(self.parse_assignment())
            self.skip_directives()
            if not self.accept(","):
                break
        self.expect(")")
        return tuple(args)

    def parse_primary(self) -> ast.Expr:
        tok = self.tok

        if tok.kind is TokenKind.IDENT:
            self.advance()
            if self.at("("):
                return ast.FunCall(tok.text, self.parse_arguments())
            return ast.Identifier(tok.text)

        if tok.kind is TokenKind.INT:
            self.advance()
            return parse_int_literal(tok)

        if tok.kind is TokenKind.FLOAT:
            self.advance()
            return ast.FloatConst(float(tok.text.rstrip("fFlL")))

        if tok.kind is TokenKind.KEYWORD:
            if tok.text in ("true", "false"):
                self.advance()
                return ast.BoolConst(tok.text == "true")
            if tok.text in BASIC_TYPES:
                # Constructor, possibly of an array type: float[2](a, b)
                self.advance()
                self.parse_array_specifier()
                return ast.FunCall(tok.text, self.parse_arguments())

        if self.accept("("):
            expr = self.parse_expression()
            self.expect(")")
            return expr

        raise self.error("expected expression")


def parse_int_literal(tok: Token) -> ast.IntConst:
    text = tok.text
    unsigned = text[-1] in "uU"
    digits = text.rstrip("uU")
    if digits[:2] in ("0x", "0X"):
        value = int(digits, 16)
    elif len(digits) > 1 and digits[0] == "0":
        try:
            value = int(digits, 8)
        except ValueError:
            raise GlslSyntaxError(
                f"invalid octal literal {text!r}", tok.line, tok.column
            ) from None
    else:
        value = int(digits)
    return ast.IntConst(value, unsigned)
