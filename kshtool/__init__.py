# kshtool/__init__.py
from kshtool.api import analyze, build
from kshtool.codec.decoder import decode
from kshtool.codec.encoder import encode, encode_container

__all__ = [
    "analyze",
    "build",
    "decode",
    "encode",
    "encode_container",
]
