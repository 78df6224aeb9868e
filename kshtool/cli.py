# kshtool/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from kshtool.assets.importers.ksh import ContainerImporter
from kshtool.batch import BatchConverter, BatchReport, verify_round_trip
from kshtool.convert import (
    analyze_file,
    build_file,
    build_from_directory,
    order_stage_pair,
    with_container_suffix,
)
from kshtool.debug.dump import dump_container
from kshtool.errors import KshError
from kshtool.settings import ConversionSettings

log = logging.getLogger("kshtool")

EPILOG = """\
examples:
  extract a container:             kshtool input.ksh output_dir
  build from a directory:          kshtool shader_dir output.ksh
  build from two files (any order): kshtool input.vs input.ps output.ksh
  extract every container:         kshtool shaders/ out/ --batch
  check round trips:               kshtool shaders/ --batch --verify
  print container structure:       kshtool input.ksh --dump
"""


def parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kshtool",
        description="Convert Don't Starve Together .ksh shader containers to and from GLSL.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path1",
        type=Path,
        help="a .ksh file, a directory holding one .vs and one .ps file, or a shader file",
    )
    parser.add_argument(
        "path2",
        type=Path,
        nargs="?",
        help="second shader file, or the output path for the other modes",
    )
    parser.add_argument(
        "path3",
        type=Path,
        nargs="?",
        help="output .ksh file when building from two shader files",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing files.")
    parser.add_argument(
        "--batch",
        action="store_true",
        help="Treat path1 as a directory of .ksh files and process all of them.",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Rebuild from the extracted sources and compare with the original bytes.",
    )
    parser.add_argument("--dump", action="store_true", help="Print the container structure.")
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=ConversionSettings().workers,
        help="Threads used by --batch (default: %(default)s).",
    )
    return parser.parse_args(argv)


def _output_dir(path: Path) -> Path:
    if path.exists() and not path.is_dir():
        raise KshError(f"Output path is not a directory: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def _report(report: BatchReport) -> int:
    for item in report.failed:
        log.error("%s: %s", item.source.name, item.detail)
    return 0 if report.ok else 1


def run(args: argparse.Namespace, settings: ConversionSettings) -> int:
    path1: Path = args.path1
    suffixes = settings.suffixes

    if args.batch:
        if not path1.is_dir():
            raise KshError(f"--batch needs a directory: {path1}")
        converter = BatchConverter(settings)
        if args.verify:
            return _report(converter.verify_all(path1))
        return _report(converter.extract_all(path1, _output_dir(args.path2 or Path("."))))

    if path1.suffix == suffixes.container:
        if args.dump:
            dump_container(ContainerImporter().import_file(path1))
            return 0
        if args.verify:
            mismatch = verify_round_trip(path1.read_bytes())
            if mismatch is not None:
                log.error("%s: %s", path1.name, mismatch.describe())
                return 1
            log.info("%s: round trip identical", path1.name)
            return 0
        out_dir = _output_dir(args.path2 or args.path3 or Path(path1.stem))
        analyze_file(path1, out_dir, force=settings.force)
        return 0

    if path1.is_dir():
        if args.path2 is None:
            raise KshError("An output .ksh file is required")
        out = with_container_suffix(args.path2, suffixes)
        build_from_directory(path1, out, force=settings.force, suffixes=suffixes)
        return 0

    if args.path2 is not None:
        for p in (path1, args.path2):
            if not p.exists():
                raise KshError(f"Shader file not found: {p}")
        vs_path, ps_path = order_stage_pair(path1, args.path2, suffixes)
        if args.path3 is None:
            raise KshError("An output .ksh file is required")
        out = with_container_suffix(args.path3, suffixes)
        build_file(vs_path, ps_path, out, force=settings.force)
        return 0

    raise KshError(
        "Invalid input. Expected a .ksh file, a directory holding .vs and .ps "
        "shaders, or two shader files (.vs and .ps, any order)"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = ConversionSettings(
        force=args.force, debug=args.debug, workers=args.workers
    )

    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    try:
        status = run(args, settings)
    except (KshError, OSError) as e:
        log.error("%s", e)
        return 1

    if status == 0:
        log.info("All tasks completed")
    return status


if __name__ == "__main__":
    sys.exit(main())
