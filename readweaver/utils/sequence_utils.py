"""
ReadWeaver v0.1.0

Sequence utility functions for ReadWeaver.

Provides common sequence manipulation and analysis functions.
"""

from pathlib import Path
from typing import Union

import numpy as np


_COMPLEMENT = str.maketrans(
    'ACGTNacgtn' + 'RYKMSWBDHVrykmswbdhv',
    'TGCANtgcan' + 'N' * 20,
)

_GC_CODES = np.frombuffer(b'GCgc', dtype=np.uint8)

GZIP_MAGIC = b'\x1f\x8b'


def reverse_complement(sequence: str) -> str:
    """
    Generate reverse complement of DNA sequence.

    Case is preserved for A/C/G/T/N. IUPAC ambiguity codes collapse to N.

    Args:
        sequence: DNA sequence string

    Returns:
        Reverse complement sequence

    Example:
        >>> reverse_complement("ATCG")
        'CGAT'
    """
    return sequence.translate(_COMPLEMENT)[::-1]


def gc_window_fractions(sequence: str, flank: int = 7) -> np.ndarray:
    """
    GC fraction of the window ``[i - flank, i + flank]`` around every position.

    Windows are clipped at the sequence ends, so edge positions are averaged
    over fewer bases.

    Args:
        sequence: DNA sequence string
        flank: Bases on each side of the centre position

    Returns:
        Float array with one fraction per position

    Example:
        >>> gc_window_fractions("GGAA", flank=1).tolist()
        [1.0, 0.6666666666666666, 0.3333333333333333, 0.0]
    """
    n = len(sequence)
    if n == 0:
        return np.zeros(0, dtype=float)

    codes = np.frombuffer(sequence.encode('ascii'), dtype=np.uint8)
    is_gc = np.isin(codes, _GC_CODES)
    cumulative = np.concatenate(([0], np.cumsum(is_gc)))

    idx = np.arange(n)
    lo = np.maximum(0, idx - flank)
    hi = np.minimum(n, idx + flank + 1)
    return (cumulative[hi] - cumulative[lo]) / (hi - lo)


def is_gzipped(path: Union[str, Path]) -> bool:
    """Check the two-byte gzip magic number at the start of a file."""
    with open(path, 'rb') as handle:
        return handle.read(2) == GZIP_MAGIC


__all__ = [
    'reverse_complement',
    'gc_window_fractions',
    'is_gzipped',
]
