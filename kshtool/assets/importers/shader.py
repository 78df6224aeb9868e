# kshtool/assets/importers/shader.py
from pathlib import Path

from kshtool.assets.importers.base import AssetImporter
from kshtool.assets.types import ShaderSource
from kshtool.errors import InvalidEncoding, InvalidPath


def file_name(path: Path) -> str:
    """File name as stored in a container. Must be valid UTF-8."""
    name = path.name
    if not name:
        raise InvalidPath(f"Invalid shader path: {path}")
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidPath(f"Shader file name is not valid UTF-8: {path}") from e
    return name


class ShaderImporter(AssetImporter):
    def import_file(self, path: Path) -> ShaderSource:
        name = file_name(path)

        # newline="" keeps CRLF intact; the bytes go into the container verbatim.
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                source = f.read()
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"{path} is not valid UTF-8: {e}") from e

        return ShaderSource(source=source, name=name, path=str(path))
