# kshtool/assets/importers/ksh.py
from pathlib import Path

from kshtool.assets.importers.base import AssetImporter
from kshtool.codec.container import Container
from kshtool.codec.decoder import decode


class ContainerImporter(AssetImporter):
    def import_file(self, path: Path) -> Container:
        with open(path, "rb") as f:
            data = f.read()

        return decode(data)
