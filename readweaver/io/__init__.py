"""
ReadWeaver v0.1.0

I/O collaborators for the simulation core:
- FASTA index (.fai) construction, parsing and freshness checks
- FASTQ and mutation-log writers

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from .fasta_index import (
    build_fasta_index,
    default_index_path,
    ensure_fasta_index,
    is_index_stale,
    read_fasta_index,
)
from .fastq_writer import FastqWriter, MutationLogWriter, split_output_paths

__all__ = [
    "build_fasta_index",
    "default_index_path",
    "ensure_fasta_index",
    "is_index_stale",
    "read_fasta_index",
    "FastqWriter",
    "MutationLogWriter",
    "split_output_paths",
]
