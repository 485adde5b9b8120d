#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

FASTQ and mutation-log output.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import gzip
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

from ..simulation.models import ConfigurationError, ReadRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_FASTQ_SUFFIXES = ('.fastq', '.fq')


def split_output_paths(out_path: PathLike) -> Tuple[Path, Path]:
    """
    Derive R1/R2 file names from a single output name.

    Example:
        >>> [p.name for p in split_output_paths('reads.fq.gz')]
        ['reads_R1.fq.gz', 'reads_R2.fq.gz']
    """
    out_path = Path(out_path)
    name = out_path.name
    gz = ''
    if name.endswith('.gz'):
        name, gz = name[:-3], '.gz'
    ext = ''
    for suffix in _FASTQ_SUFFIXES:
        if name.endswith(suffix):
            name, ext = name[:-len(suffix)], suffix
            break
    ext = (ext or '.fq') + gz
    return (out_path.with_name(f"{name}_R1{ext}"),
            out_path.with_name(f"{name}_R2{ext}"))


def _open_text(path: Path) -> TextIO:
    if path.suffix == '.gz':
        return gzip.open(path, 'wt')
    return open(path, 'w')


class FastqWriter:
    """
    Sink for simulated reads.

    Single destination (interleaved when paired) or, with ``split=True``,
    mate 1 and mate 2 in separate ``_R1``/``_R2`` files. ``out_path=None``
    writes to stdout. Paths ending in ``.gz`` are gzip-compressed.
    """

    def __init__(self, out_path: Optional[PathLike] = None, split: bool = False):
        if split and out_path is None:
            raise ConfigurationError("split output needs an output file name, not stdout")
        self.out_path = Path(out_path) if out_path is not None else None
        self.split = split
        self.records_written = 0
        self._handles: List[TextIO] = []
        self._owns_handles = out_path is not None

    @property
    def paths(self) -> List[Path]:
        if self.out_path is None:
            return []
        if self.split:
            return list(split_output_paths(self.out_path))
        return [self.out_path]

    def open(self) -> 'FastqWriter':
        if self._handles:
            return self
        if self.out_path is None:
            self._handles = [sys.stdout]
        else:
            self.out_path.parent.mkdir(parents=True, exist_ok=True)
            self._handles = [_open_text(p) for p in self.paths]
        return self

    def close(self) -> None:
        if self._owns_handles:
            for handle in self._handles:
                handle.close()
        else:
            for handle in self._handles:
                handle.flush()
        self._handles = []

    def __enter__(self) -> 'FastqWriter':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _handle_for(self, mate: Optional[int]) -> TextIO:
        if self.split and mate == 2:
            return self._handles[1]
        return self._handles[0]

    def write(self, record: ReadRecord) -> None:
        self._handle_for(record.mate).write(record.to_fastq())
        self.records_written += 1

    def append_spools(self, spool_paths: List[Path], record_count: int = 0) -> None:
        """
        Append finished spool files, one per destination, in destination order.
        """
        if len(spool_paths) != len(self._handles):
            raise ValueError(
                f"expected {len(self._handles)} spool file(s), got {len(spool_paths)}"
            )
        for spool_path, handle in zip(spool_paths, self._handles):
            with open(spool_path, 'r') as spool:
                shutil.copyfileobj(spool, handle)
        self.records_written += record_count


class MutationLogWriter:
    """Line sink for mutation log entries (a file, or stderr by default)."""

    def __init__(self, path: Optional[PathLike] = None):
        self.path = Path(path) if path is not None else None
        if self.path is None:
            self._handle = sys.stderr
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.path, 'w')
        self.lines_written = 0

    def write(self, line: str) -> None:
        self._handle.write(line + '\n')
        self.lines_written += 1

    def append_spool(self, spool_path: PathLike) -> None:
        with open(spool_path, 'r') as spool:
            shutil.copyfileobj(spool, self._handle)

    def close(self) -> None:
        if self.path is not None:
            self._handle.close()
        else:
            self._handle.flush()

    def __enter__(self) -> 'MutationLogWriter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
