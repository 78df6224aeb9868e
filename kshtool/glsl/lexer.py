# kshtool/glsl/lexer.py
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List


class TokenKind(Enum):
    IDENT = auto()
    KEYWORD = auto()
    INT = auto()
    FLOAT = auto()
    OP = auto()
    DIRECTIVE = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int


class GlslSyntaxError(Exception):
    """Parser diagnostic with a 1-based source position."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


BASIC_TYPES = frozenset(
    {
        "void", "bool", "int", "uint", "float", "double",
        "vec2", "vec3", "vec4", "bvec2", "bvec3", "bvec4",
        "ivec2", "ivec3", "ivec4", "uvec2", "uvec3", "uvec4",
        "dvec2", "dvec3", "dvec4",
        "mat2", "mat3", "mat4",
        "mat2x2", "mat2x3", "mat2x4", "mat3x2", "mat3x3", "mat3x4",
        "mat4x2", "mat4x3", "mat4x4",
        "dmat2", "dmat3", "dmat4",
        "sampler1D", "sampler2D", "sampler3D", "samplerCube",
        "sampler2DRect", "sampler1DArray", "sampler2DArray",
        "samplerCubeArray", "samplerBuffer", "sampler2DMS",
        "sampler2DMSArray", "sampler1DShadow", "sampler2DShadow",
        "samplerCubeShadow", "sampler2DRectShadow", "sampler1DArrayShadow",
        "sampler2DArrayShadow", "samplerCubeArrayShadow", "samplerExternalOES",
        "isampler1D", "isampler2D", "isampler3D", "isamplerCube",
        "isampler2DArray", "usampler1D", "usampler2D", "usampler3D",
        "usamplerCube", "usampler2DArray",
        "image1D", "image2D", "image3D", "imageCube", "image2DArray",
        "iimage2D", "uimage2D", "atomic_uint",
    }
)

HARD_QUALIFIERS = frozenset(
    {
        "const", "uniform", "attribute", "varying", "in", "out", "inout",
        "highp", "mediump", "lowp", "invariant", "layout",
    }
)

# Newer-GLSL qualifiers that older shaders happily use as variable names
# (`vec4 sample = ...`). Lexed as identifiers; the parser decides by context.
SOFT_QUALIFIERS = frozenset(
    {
        "buffer", "shared", "centroid", "sample", "patch", "flat", "smooth",
        "noperspective", "precise", "coherent", "volatile", "restrict",
        "readonly", "writeonly",
    }
)

QUALIFIERS = HARD_QUALIFIERS | SOFT_QUALIFIERS

KEYWORDS = (
    BASIC_TYPES
    | HARD_QUALIFIERS
    | {
        "struct", "precision", "if", "else", "switch", "case", "default",
        "while", "do", "for", "break", "continue", "return", "discard",
        "true", "false",
    }
)

# Longest operators first so "<<=" wins over "<<" and "<".
_OPERATORS = [
    "<<=", ">>=",
    "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||", "^^",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
    "+", "-", "*", "/", "%", "<", ">", "=", "!", "~", "&", "|", "^",
    "?", ":", ";", ",", ".", "(", ")", "[", "]", "{", "}",
]

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
    | (?P<space>[ \t\r\f\v]+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?\*/)
    | (?P<open_comment>/\*)
    | (?P<float>
        (?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?(?:lf|LF|f|F)?
        | \d+[eE][+-]?\d+(?:lf|LF|f|F)?
        | \d+(?:f|F)(?![\w])
      )
    | (?P<int>(?:0[xX][0-9a-fA-F]+|\d+)[uU]?)
    | (?P<ident>[A-Za-z_]\w*)
    | (?P<op>"""
    + "|".join(re.escape(op) for op in _OPERATORS)
    + r""")
    """,
    re.VERBOSE | re.DOTALL,
)

# A backslash before LF or CRLF continues the directive on the next line.
_DIRECTIVE_RE = re.compile(r"[ \t]*#(?:[^\n\\]|\\\r?\n|\\)*")


def _tokens(source: str) -> Iterator[Token]:
    pos = 0
    line = 1
    line_start = 0
    at_line_start = True
    end = len(source)

    while pos < end:
        column = pos - line_start + 1

        # Preprocessor lines are kept whole and never expanded.
        if at_line_start:
            m = _DIRECTIVE_RE.match(source, pos)
            if m:
                text = m.group(0)
                yield Token(TokenKind.DIRECTIVE, text.strip(), line, column)
                newlines = text.count("\n")
                if newlines:
                    line += newlines
                    line_start = pos + text.rfind("\n") + 1
                pos = m.end()
                continue

        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise GlslSyntaxError(
                f"unexpected character {source[pos]!r}", line, column
            )

        kind = m.lastgroup
        text = m.group(0)
        pos = m.end()

        if kind == "newline":
            line += 1
            line_start = pos
            at_line_start = True
            continue
        if kind == "space":
            continue
        if kind == "line_comment":
            continue
        if kind == "open_comment":
            raise GlslSyntaxError("unterminated block comment", line, column)
        if kind == "block_comment":
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = m.start() + text.rfind("\n") + 1
            continue

        at_line_start = False
        if kind == "ident":
            tk = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENT
        elif kind == "float":
            tk = TokenKind.FLOAT
        elif kind == "int":
            tk = TokenKind.INT
        else:
            tk = TokenKind.OP
        yield Token(tk, text, line, column)

    yield Token(TokenKind.EOF, "", line, pos - line_start + 1)


def tokenize(source: str) -> List[Token]:
    """Split GLSL source into tokens, dropping whitespace and comments."""
    return list(_tokens(source))
