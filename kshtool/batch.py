# kshtool/batch.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from kshtool.codec.decoder import decode
from kshtool.codec.encoder import encode
from kshtool.convert import analyze_file
from kshtool.errors import KshError
from kshtool.settings import ConversionSettings

log = logging.getLogger(__name__)

CONTEXT_BYTES = 10


@dataclass(frozen=True)
class Mismatch:
    """First place where a rebuilt container differs from the original."""

    offset: int
    expected_size: int
    actual_size: int
    expected: bytes  # Bytes around `offset` in the original.
    actual: bytes  # Bytes around `offset` in the rebuilt file.

    def describe(self) -> str:
        text = f"difference at byte {self.offset}: {self.expected.hex(' ')} != {self.actual.hex(' ')}"
        if self.expected_size != self.actual_size:
            text += f" (sizes {self.expected_size} != {self.actual_size})"
        return text


@dataclass(frozen=True)
class BatchItem:
    source: Path
    ok: bool
    detail: str = ""


@dataclass(frozen=True)
class BatchReport:
    items: List[BatchItem]

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def failed(self) -> List[BatchItem]:
        return [item for item in self.items if not item.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def first_difference(expected: bytes, actual: bytes) -> Optional[Mismatch]:
    if expected == actual:
        return None

    n = min(len(expected), len(actual))
    offset = n  # Equal prefix: the shorter file simply ends early.
    if n:
        a = np.frombuffer(expected, dtype=np.uint8, count=n)
        b = np.frombuffer(actual, dtype=np.uint8, count=n)
        diff = np.flatnonzero(a != b)
        if diff.size:
            offset = int(diff[0])

    start = max(offset - CONTEXT_BYTES, 0)
    end = offset + CONTEXT_BYTES
    return Mismatch(
        offset=offset,
        expected_size=len(expected),
        actual_size=len(actual),
        expected=expected[start:end],
        actual=actual[start:end],
    )


def verify_round_trip(data: bytes) -> Optional[Mismatch]:
    """Decode, rebuild from the extracted sources alone and compare."""
    container = decode(data)
    rebuilt = encode(
        container.name,
        container.vertex.name,
        container.vertex.source,
        container.pixel.name,
        container.pixel.source,
    )
    return first_difference(data, rebuilt)


class BatchConverter:
    """
    Runs one task per container on a thread pool.
    Conversions share nothing, so tasks need no coordination.
    """

    def __init__(self, settings: Optional[ConversionSettings] = None) -> None:
        self.settings = settings or ConversionSettings()

    def containers(self, directory: Path) -> List[Path]:
        suffix = self.settings.suffixes.container
        return sorted(
            p for p in directory.iterdir() if p.is_file() and p.suffix == suffix
        )

    def _run(
        self, directory: Path, task: Callable[[Path], BatchItem]
    ) -> BatchReport:
        paths = self.containers(directory)
        with ThreadPoolExecutor(
            max_workers=max(1, self.settings.workers),
            thread_name_prefix="KshWorker",
        ) as executor:
            items = list(executor.map(task, paths))

        report = BatchReport(items)
        log.info(
            "%d of %d containers succeeded", report.total - len(report.failed), report.total
        )
        return report

    def extract_all(self, directory: Path, out_dir: Path) -> BatchReport:
        """Extract every container into `out_dir/<container stem>/`."""

        def task(path: Path) -> BatchItem:
            try:
                vs, ps = analyze_file(
                    path, out_dir / path.stem, force=self.settings.force
                )
            except (KshError, OSError) as e:
                log.error("Failed to extract %s: %s", path.name, e)
                return BatchItem(path, False, str(e))
            return BatchItem(path, True, f"{vs.name}, {ps.name}")

        return self._run(directory, task)

    def verify_all(self, directory: Path) -> BatchReport:
        def task(path: Path) -> BatchItem:
            try:
                mismatch = verify_round_trip(path.read_bytes())
            except (KshError, OSError) as e:
                log.error("Failed to verify %s: %s", path.name, e)
                return BatchItem(path, False, str(e))
            if mismatch is not None:
                log.warning("%s: %s", path.name, mismatch.describe())
                return BatchItem(path, False, mismatch.describe())
            log.debug("%s: round trip identical", path.name)
            return BatchItem(path, True)

        return self._run(directory, task)
