# kshtool/convert.py
"""
File-level conversions: one container on disk <-> two shader files on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from kshtool.assets.importers.ksh import ContainerImporter
from kshtool.assets.importers.shader import ShaderImporter
from kshtool.codec.encoder import encode
from kshtool.errors import AlreadyExists, InvalidPath, StagePairNotFound
from kshtool.settings import SuffixSettings

log = logging.getLogger(__name__)

_containers = ContainerImporter()
_shaders = ShaderImporter()


def container_name(out_path: Path) -> str:
    """Logical container name: the output file stem."""
    stem = out_path.stem
    if not stem:
        raise InvalidPath(f"Invalid output path: {out_path}")
    try:
        stem.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidPath(f"Output path is not valid UTF-8: {out_path}") from e
    return stem


def with_container_suffix(path: Path, suffixes: Optional[SuffixSettings] = None) -> Path:
    suffix = (suffixes or SuffixSettings()).container
    return path if path.suffix == suffix else path.with_suffix(suffix)


def _stage_target(out_dir: Path, name: str) -> Path:
    # Stage names come from the file; never let them escape out_dir.
    if not name or name in (".", "..") or Path(name).name != name:
        raise InvalidPath(f"Refusing to write stage named {name!r}")
    return out_dir / name


def _check_writable(path: Path, force: bool) -> None:
    if not force and path.exists():
        raise AlreadyExists(f"Output file already exists: {path}")


def analyze_file(path: Path, out_dir: Path, force: bool = False) -> Tuple[Path, Path]:
    """
    Extract both shader stages of a container into `out_dir`.
    Nothing is written unless both targets may be written.
    """
    log.info("Analyzing %s", path)
    container = _containers.import_file(path)

    targets = []
    for stage in container.stages():
        target = _stage_target(out_dir, stage.name)
        if any(target == seen for seen, _ in targets):
            raise InvalidPath(
                f"Both stages of {path.name} are named {stage.name!r}"
            )
        _check_writable(target, force)
        targets.append((target, stage.source))

    out_dir.mkdir(parents=True, exist_ok=True)
    for target, source in targets:
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(source)

    log.info("Wrote %s and %s", targets[0][0].name, targets[1][0].name)
    return targets[0][0], targets[1][0]


def build_bytes(vs_path: Path, ps_path: Path, name: str) -> bytes:
    vertex = _shaders.import_file(vs_path)
    pixel = _shaders.import_file(ps_path)
    return encode(name, vertex.name, vertex.source, pixel.name, pixel.source)


def build_file(
    vs_path: Path, ps_path: Path, out_path: Path, force: bool = False
) -> Path:
    """Build `out_path` from a vertex and a pixel shader file."""
    log.info("Building %s from %s and %s", out_path, vs_path.name, ps_path.name)
    _check_writable(out_path, force)

    data = build_bytes(vs_path, ps_path, container_name(out_path))

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(data)

    log.info("Wrote %s (%d bytes)", out_path, len(data))
    return out_path


def find_stage_pair(
    directory: Path, suffixes: Optional[SuffixSettings] = None
) -> Tuple[Path, Path]:
    """Locate the single vertex and single pixel shader inside `directory`."""
    suffixes = suffixes or SuffixSettings()
    entries = sorted(p for p in directory.iterdir() if p.is_file())
    vertex = [p for p in entries if p.suffix == suffixes.vertex]
    pixel = [p for p in entries if p.suffix == suffixes.pixel]

    if len(vertex) != 1 or len(pixel) != 1:
        raise StagePairNotFound(
            f"{directory} must contain exactly one {suffixes.vertex} and one "
            f"{suffixes.pixel} file (found {len(vertex)} and {len(pixel)})"
        )
    return vertex[0], pixel[0]


def order_stage_pair(
    first: Path, second: Path, suffixes: Optional[SuffixSettings] = None
) -> Tuple[Path, Path]:
    """Return (vertex, pixel) for two shader files given in either order."""
    suffixes = suffixes or SuffixSettings()
    by_suffix = {first.suffix: first, second.suffix: second}
    vertex = by_suffix.get(suffixes.vertex)
    pixel = by_suffix.get(suffixes.pixel)

    if vertex is None or pixel is None:
        raise StagePairNotFound(
            f"Need one {suffixes.vertex} and one {suffixes.pixel} file, "
            f"got {first.name} and {second.name}"
        )
    return vertex, pixel


def build_from_directory(
    directory: Path,
    out_path: Path,
    force: bool = False,
    suffixes: Optional[SuffixSettings] = None,
) -> Path:
    vs_path, ps_path = find_stage_pair(directory, suffixes)
    return build_file(vs_path, ps_path, out_path, force=force)
