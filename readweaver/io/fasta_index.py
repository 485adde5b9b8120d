#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

FASTA index (.fai) construction and parsing.

The index uses the samtools five-column layout:
    name  length  offset  bases_per_line  bytes_per_line

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..simulation.models import FastaIndexError, IndexRecord
from ..utils.sequence_utils import is_gzipped

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def default_index_path(fasta_path: PathLike) -> Path:
    fasta_path = Path(fasta_path)
    return fasta_path.with_name(fasta_path.name + '.fai')


class _RecordBuilder:
    """Accumulates line geometry for the sequence currently being scanned."""

    def __init__(self, seq_id: str, offset: int):
        self.seq_id = seq_id
        self.offset = offset
        self.seq_len = 0
        self.bases_per_line = 0
        self.bytes_per_line = 0
        self.short_line_seen = False

    def add_line(self, line: bytes, line_no: int) -> None:
        bases = len(line.rstrip(b'\r\n'))
        if self.seq_len == 0:
            self.bases_per_line = bases
            self.bytes_per_line = len(line)
        elif self.short_line_seen or bases > self.bases_per_line:
            raise FastaIndexError(
                f"{self.seq_id}: inconsistent line length at line {line_no}; "
                f"random access needs uniformly wrapped sequences"
            )
        if bases < self.bases_per_line:
            self.short_line_seen = True
        self.seq_len += bases

    def build(self) -> IndexRecord:
        return IndexRecord(self.seq_id, self.seq_len, self.offset,
                           self.bases_per_line, self.bytes_per_line)


def scan_fasta(fasta_path: PathLike) -> List[IndexRecord]:
    """
    Scan a FASTA file and compute index records.

    The file is read in binary mode so that byte offsets are exact for both
    ``\\n`` and ``\\r\\n`` line endings. Blank lines inside a sequence end it;
    a sequence line after a shorter one is an error.
    """
    fasta_path = Path(fasta_path)
    if is_gzipped(fasta_path):
        raise FastaIndexError(
            f"{fasta_path} is gzip-compressed; decompress it before indexing"
        )

    records: List[IndexRecord] = []
    seen = set()
    current: Optional[_RecordBuilder] = None
    byte_count = 0

    with open(fasta_path, 'rb') as handle:
        for line_no, line in enumerate(handle, start=1):
            byte_count += len(line)
            if line.startswith(b'>'):
                if current is not None:
                    records.append(current.build())
                fields = line[1:].split()
                if not fields:
                    raise FastaIndexError(f"empty FASTA header at line {line_no}")
                seq_id = fields[0].decode('ascii', errors='replace')
                if seq_id in seen:
                    raise FastaIndexError(f"duplicate sequence ID {seq_id!r} at line {line_no}")
                seen.add(seq_id)
                current = _RecordBuilder(seq_id, byte_count)
                continue

            if not line.strip():
                if current is not None:
                    current.short_line_seen = True
                continue
            if current is None:
                raise FastaIndexError(f"sequence data before the first header at line {line_no}")
            current.add_line(line, line_no)

    if current is not None:
        records.append(current.build())
    return records


def write_fasta_index(records: List[IndexRecord], index_path: PathLike) -> None:
    with open(index_path, 'w') as f:
        for record in records:
            f.write(record.to_fai_line() + '\n')


def build_fasta_index(fasta_path: PathLike,
                      index_path: Optional[PathLike] = None) -> List[IndexRecord]:
    """
    Build and write the ``.fai`` index for a FASTA file.

    Args:
        fasta_path: Uncompressed FASTA file
        index_path: Output path (default: ``<fasta>.fai``)

    Returns:
        The index records, in file order
    """
    index_path = Path(index_path) if index_path else default_index_path(fasta_path)
    records = scan_fasta(fasta_path)
    write_fasta_index(records, index_path)
    logger.info(f"Indexed {len(records)} sequence(s) from {fasta_path} -> {index_path}")
    return records


def read_fasta_index(index_path: PathLike) -> Dict[str, IndexRecord]:
    """Parse a ``.fai`` file into an ID -> IndexRecord map (file order preserved)."""
    index: Dict[str, IndexRecord] = {}
    with open(index_path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip('\r\n')
            if not line:
                continue
            fields = line.split('\t')
            if len(fields) < 5:
                raise FastaIndexError(f"invalid .fai line {line_no}: {line!r}")
            try:
                record = IndexRecord(
                    seq_id=fields[0],
                    seq_len=int(fields[1]),
                    offset=int(fields[2]),
                    bases_per_line=int(fields[3]),
                    bytes_per_line=int(fields[4]),
                )
            except ValueError as e:
                raise FastaIndexError(f"failed parsing .fai line {line_no} {line!r}: {e}") from e
            index[record.seq_id] = record
    return index


def is_index_stale(fasta_path: PathLike, index_path: PathLike) -> bool:
    """True when the index is missing or older than the FASTA it describes."""
    index_path = Path(index_path)
    if not index_path.exists():
        return True
    return os.path.getmtime(fasta_path) > os.path.getmtime(index_path)


def ensure_fasta_index(fasta_path: PathLike) -> Dict[str, IndexRecord]:
    """Load the index for ``fasta_path``, building or rebuilding it when needed."""
    index_path = default_index_path(fasta_path)
    if not index_path.exists():
        logger.info(f"No index found for {fasta_path}; building {index_path}")
        build_fasta_index(fasta_path, index_path)
    elif is_index_stale(fasta_path, index_path):
        logger.warning(f"{fasta_path} was modified after {index_path}; regenerating index")
        build_fasta_index(fasta_path, index_path)
    return read_fasta_index(index_path)

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
