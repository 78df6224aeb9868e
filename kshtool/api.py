# kshtool/api.py
"""
Two-call boundary for front ends: `analyze` a container, `build` one back.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Union

from kshtool.assets.importers.ksh import ContainerImporter
from kshtool.codec.encoder import encode
from kshtool.convert import container_name

StageInfo = Dict[str, str]
PathLike = Union[str, "os.PathLike[str]"]


def analyze(path: PathLike) -> Dict[str, StageInfo]:
    """
    Returns {"vs": {"name", "content"}, "ps": {"name", "content"}}.
    """
    container = ContainerImporter().import_file(Path(path))
    return {
        "vs": {"name": container.vertex.name, "content": container.vertex.source},
        "ps": {"name": container.pixel.name, "content": container.pixel.source},
    }


def build(
    output_path: PathLike,
    vs_name: str,
    vs_content: str,
    ps_name: str,
    ps_content: str,
) -> None:
    """Encode both stages and write the container to `output_path`."""
    out = Path(output_path)
    data = encode(container_name(out), vs_name, vs_content, ps_name, ps_content)
    out.write_bytes(data)
