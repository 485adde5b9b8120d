#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Data model for read simulation: index geometry, region requests, model
configuration, mutation results, emitted read records and the exception
hierarchy shared by the simulation core and its collaborators.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from ..utils.sequence_utils import reverse_complement


# ============================================================================
#                           EXCEPTIONS
# ============================================================================

class ReadWeaverError(Exception):
    """Base class for all ReadWeaver errors."""
    pass


class ConfigurationError(ReadWeaverError):
    """Raised when simulation parameters are out of range or inconsistent."""
    pass


class FastaIndexError(ReadWeaverError):
    """Raised when a FASTA index cannot be built or parsed."""
    pass


class SequenceLookupError(ReadWeaverError):
    """Raised when a requested sequence ID is absent from the index."""
    pass


class GeometryError(ReadWeaverError):
    """Raised when a region cannot hold the requested read or fragment lengths."""
    pass


class ArchiveReadError(ReadWeaverError):
    """Raised when a seek or read on the reference archive fails."""
    pass


# ============================================================================
#                           INDEX AND REGIONS
# ============================================================================

@dataclass(frozen=True)
class IndexRecord:
    """
    Line geometry for one sequence of a FASTA archive (one ``.fai`` line).

    Attributes:
        seq_id: Sequence identifier (header up to the first whitespace)
        seq_len: Number of bases in the sequence
        offset: Byte offset of the first base
        bases_per_line: Bases on each full line
        bytes_per_line: Bytes on each full line, terminator included
    """
    seq_id: str
    seq_len: int
    offset: int
    bases_per_line: int
    bytes_per_line: int

    def __post_init__(self):
        if self.bases_per_line <= 0 and self.seq_len > 0:
            raise FastaIndexError(
                f"{self.seq_id}: bases per line must be positive, got {self.bases_per_line}"
            )
        if self.bases_per_line > self.bytes_per_line:
            raise FastaIndexError(
                f"{self.seq_id}: bases per line ({self.bases_per_line}) exceeds "
                f"bytes per line ({self.bytes_per_line})"
            )

    def to_fai_line(self) -> str:
        return (f"{self.seq_id}\t{self.seq_len}\t{self.offset}\t"
                f"{self.bases_per_line}\t{self.bytes_per_line}")


@dataclass(frozen=True)
class RegionRequest:
    """
    Half-open logical range ``[start, end)`` on a named sequence.

    ``None`` bounds stand for the start and end of the sequence and are
    filled in by :meth:`resolve`.
    """
    seq_id: str
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> 'RegionRequest':
        """
        Parse ``<id>[,<start>[,<end>]]``; empty fields mean "unbounded".

        Example:
            >>> RegionRequest.parse("chr1,100,200")
            RegionRequest(seq_id='chr1', start=100, end=200)
        """
        parts = text.split(',')
        if not parts[0]:
            raise ValueError("missing sequence ID")
        try:
            start = int(parts[1]) if len(parts) > 1 and parts[1] != '' else None
            end = int(parts[2]) if len(parts) > 2 and parts[2] != '' else None
        except ValueError as e:
            raise ValueError(f"invalid coordinate in range {text!r}: {e}") from e
        if start is not None and end is not None and start >= end:
            raise ValueError(f"start must be less than end: got {start} >= {end}")
        return cls(parts[0], start, end)

    def resolve(self, record: IndexRecord) -> 'RegionRequest':
        """Fill open bounds from the index record and clamp ``end`` to the sequence."""
        start = 0 if self.start is None else self.start
        end = record.seq_len if self.end is None else min(self.end, record.seq_len)
        if start < 0 or start >= end:
            raise GeometryError(
                f"region {self.label} is empty or outside {record.seq_id} "
                f"(length {record.seq_len})"
            )
        return RegionRequest(self.seq_id, start, end)

    @property
    def length(self) -> int:
        if self.start is None or self.end is None:
            raise ValueError(f"region {self.label} is not resolved")
        return self.end - self.start

    @property
    def label(self) -> str:
        start = '' if self.start is None else self.start
        end = '' if self.end is None else self.end
        return f"{self.seq_id}:{start}-{end}"


# ============================================================================
#                           MODEL CONFIGURATION
# ============================================================================

class QualityProfile(Enum):
    """Quality-score model families."""
    SHORT = "short"
    LONG = "long"


@dataclass(frozen=True)
class ErrorModelConfig:
    """
    Error injection parameters.

    Attributes:
        substitution_rate: Per-base substitution probability
        indel_rate: Per-base insertion/deletion probability
        ambiguous_rate: Per-base probability of emitting N
        cluster_bias: Rate multiplier after a mutated position
        gc_boost: Substitution multiplier in GC-rich windows (> 60% GC)
        homopolymer_multiplier: Indel multiplier inside runs of 3 or more
        max_indel_length: Longest insertion, and the deletion span
    """
    substitution_rate: float = 0.0
    indel_rate: float = 0.0
    ambiguous_rate: float = 0.0
    cluster_bias: float = 2.0
    gc_boost: float = 1.5
    homopolymer_multiplier: float = 2.0
    max_indel_length: int = 3

    def validate(self) -> None:
        errors = []
        for name in ('substitution_rate', 'indel_rate', 'ambiguous_rate'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be between 0.0 and 1.0, got {value}")
        for name in ('cluster_bias', 'gc_boost', 'homopolymer_multiplier'):
            value = getattr(self, name)
            if value < 1.0:
                errors.append(f"{name} must be >= 1.0, got {value}")
        if self.max_indel_length < 1:
            errors.append(f"max_indel_length must be >= 1, got {self.max_indel_length}")
        if errors:
            raise ConfigurationError("; ".join(errors))


@dataclass(frozen=True)
class LengthModelConfig:
    """
    Read or fragment length distribution.

    ``std_dev == 0`` means every draw is exactly ``mean``.
    """
    mean: int
    std_dev: int = 0
    min_length: int = 1
    max_length: int = 50_000

    @property
    def is_fixed(self) -> bool:
        return self.std_dev == 0

    def validate(self, name: str = 'length') -> None:
        errors = []
        if self.mean <= 0:
            errors.append(f"{name} mean must be positive, got {self.mean}")
        if self.std_dev < 0:
            errors.append(f"{name} stddev must be >= 0, got {self.std_dev}")
        if self.min_length <= 0:
            errors.append(f"{name} min must be positive, got {self.min_length}")
        if self.min_length > self.max_length:
            errors.append(f"{name} min ({self.min_length}) exceeds max ({self.max_length})")
        elif self.is_fixed and not self.min_length <= self.mean <= self.max_length:
            errors.append(
                f"fixed {name} {self.mean} lies outside [{self.min_length}, {self.max_length}]"
            )
        if errors:
            raise ConfigurationError("; ".join(errors))


@dataclass(frozen=True)
class SimulationSettings:
    """
    Everything one simulation run needs, resolved from defaults, presets,
    configuration files and command-line flags.
    """
    error_model: ErrorModelConfig = field(default_factory=ErrorModelConfig)
    read_length: LengthModelConfig = field(
        default_factory=lambda: LengthModelConfig(150, 0, 50, 50_000))
    fragment_mean: int = 600
    fragment_std_dev: int = 150
    coverage_depth: float = 5.0
    quality_profile: QualityProfile = QualityProfile.SHORT
    paired: bool = False
    split_reads: bool = False
    log_mutations: bool = False
    seed: Optional[int] = None
    threads: int = 1

    @property
    def fragment_length(self) -> LengthModelConfig:
        """Fragment bounds are twice the read bounds, so both mates always fit."""
        return LengthModelConfig(
            mean=self.fragment_mean,
            std_dev=self.fragment_std_dev,
            min_length=2 * self.read_length.min_length,
            max_length=2 * self.read_length.max_length,
        )

    @property
    def mate_length(self) -> int:
        return self.read_length.min_length

    def validate(self) -> None:
        """Raise ConfigurationError before any region is touched."""
        self.error_model.validate()
        self.read_length.validate('read length')
        if self.paired:
            self.fragment_length.validate('fragment length')
        if self.coverage_depth <= 0:
            raise ConfigurationError(f"depth must be positive, got {self.coverage_depth}")
        if self.threads < 1:
            raise ConfigurationError(f"threads must be >= 1, got {self.threads}")


# ============================================================================
#                           SIMULATION RESULTS
# ============================================================================

@dataclass
class MutationEvent:
    """
    One injected error, positioned on the input (pre-mutation) sequence.

    Attributes:
        kind: 'ambiguous', 'substitution', 'deletion' or 'insertion'
        position: Input coordinate of the event
        ref: Original base(s) (deleted span for deletions)
        alt: Emitted base(s) (inserted span for insertions)
    """
    kind: str
    position: int
    ref: str = ''
    alt: str = ''

    def __str__(self) -> str:
        if self.kind == 'deletion':
            return f"del @{self.position}: {self.ref}"
        if self.kind == 'insertion':
            return f"ins @{self.position}: {self.alt}"
        return f"{self.ref} -> {self.alt} @{self.position}"


@dataclass
class MutationResult:
    """Mutated bases, a parallel per-base error mask and the event log."""
    bases: str
    error_mask: np.ndarray
    mutation_log: List[MutationEvent] = field(default_factory=list)

    def __post_init__(self):
        if len(self.bases) != len(self.error_mask):
            raise ValueError(
                f"error mask length {len(self.error_mask)} does not match "
                f"sequence length {len(self.bases)}"
            )

    @property
    def error_count(self) -> int:
        return int(np.count_nonzero(self.error_mask))


@dataclass
class ReadRecord:
    """
    A simulated read ready for serialization.

    Attributes:
        id: Read identifier (without the leading '@')
        sequence: Read bases
        quality: Phred+33 quality string, same length as ``sequence``
        strand: '+' or '-'
        mate: 1 or 2 in paired-end mode, otherwise None
    """
    id: str
    sequence: str
    quality: str
    strand: str = '+'
    mate: Optional[int] = None

    def __post_init__(self):
        if len(self.sequence) != len(self.quality):
            raise ValueError(
                f"read {self.id}: quality length {len(self.quality)} != "
                f"sequence length {len(self.sequence)}"
            )

    def to_fastq(self) -> str:
        """Convert to FASTQ format."""
        return f"@{self.id}\n{self.sequence}\n+\n{self.quality}\n"


@dataclass
class FragmentSample:
    """A sampled fragment; mates are derived views of its two ends."""
    seq_id: str
    start: int
    end: int
    byte_start: int
    byte_end: int
    bases: str

    @property
    def length(self) -> int:
        return self.end - self.start

    def read1_bases(self, read_len: int) -> str:
        return self.bases[:read_len]

    def read2_bases(self, read_len: int) -> str:
        return reverse_complement(self.bases[len(self.bases) - read_len:])


@dataclass
class RegionStats:
    """Counters for one processed region."""
    region: RegionRequest
    reads_emitted: int = 0
    bases_simulated: int = 0
    rejected_draws: int = 0
    failed_draws: int = 0
    mutations: int = 0


@dataclass
class RunSummary:
    """Aggregate result of a simulation run."""
    seed: int
    regions_processed: List[RegionStats] = field(default_factory=list)
    regions_failed: List[tuple] = field(default_factory=list)

    @property
    def reads_emitted(self) -> int:
        return sum(s.reads_emitted for s in self.regions_processed)

    @property
    def bases_simulated(self) -> int:
        return sum(s.bases_simulated for s in self.regions_processed)

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
