# kshtool/assets/importers/__init__.py
from kshtool.assets.importers.base import AssetImporter
from kshtool.assets.importers.ksh import ContainerImporter
from kshtool.assets.importers.shader import ShaderImporter

__all__ = [
    "AssetImporter",
    "ContainerImporter",
    "ShaderImporter",
]
