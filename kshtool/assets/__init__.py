# kshtool/assets/__init__.py
from kshtool.assets.importers import (
    AssetImporter,
    ContainerImporter,
    ShaderImporter,
)
from kshtool.assets.types import ShaderSource

__all__ = [
    "AssetImporter",
    "ContainerImporter",
    "ShaderImporter",
    "ShaderSource",
]
