# kshtool/codec/__init__.py
from kshtool.codec.container import Container, ShaderStage, UniformIndex
from kshtool.codec.cursor import BinaryReader, BinaryWriter
from kshtool.codec.variable import Variable, VariableScope, VariableType

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "Container",
    "ShaderStage",
    "UniformIndex",
    "Variable",
    "VariableScope",
    "VariableType",
]
