# kshtool/glsl/__init__.py
from kshtool.glsl.lexer import GlslSyntaxError
from kshtool.glsl.parser import parse

__all__ = ["GlslSyntaxError", "parse"]
