#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Coverage-driven read sampling for one region.

Reads (or fragments) are drawn at uniformly random positions until the
number of sampled bases reaches ``region length x coverage depth``. Each
draw is extracted from the archive, optionally reverse-complemented, run
through the error model and scored, then handed to the ``emit`` callback.

Read IDs carry the ground truth:
    single-end  <seq>_<start>_<end>_(<strand>)
    paired-end  <seq>_<frag_start>_<frag_end>/1 and /2

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from ..utils.sequence_utils import reverse_complement
from .coordinates import RegionExtractor, byte_offset
from .error_model import ErrorInjector
from .length_sampler import LengthSampler
from .models import (
    ArchiveReadError,
    FragmentSample,
    GeometryError,
    IndexRecord,
    MutationResult,
    ReadRecord,
    RegionRequest,
    RegionStats,
    SimulationSettings,
)
from .quality import quality_model

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_REJECTIONS = 10_000
MAX_CONSECUTIVE_FAILURES = 100

ReadSink = Callable[[ReadRecord], None]
LogSink = Callable[[str], None]


class RegionSimulator:
    """
    Sample reads from regions of one reference archive.

    Args:
        extractor: Random-access reader over the archive
        settings: Resolved simulation settings
        rng: Random stream dedicated to this simulator
        emit: Receives every ReadRecord as soon as it is built
        log_emit: Receives mutation log lines when mutation logging is on
    """

    def __init__(self, extractor: RegionExtractor, settings: SimulationSettings,
                 rng: np.random.Generator, emit: ReadSink,
                 log_emit: Optional[LogSink] = None):
        self.extractor = extractor
        self.settings = settings
        self.rng = rng
        self.emit = emit
        self.log_emit = log_emit if settings.log_mutations else None

        self.injector = ErrorInjector(settings.error_model, rng)
        self.score = quality_model(settings.quality_profile, rng)

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _mutate(self, read_id: str, bases: str) -> MutationResult:
        result = self.injector.inject(bases)
        if self.log_emit is not None:
            for event in result.mutation_log:
                self.log_emit(f"{read_id} MUT {event}")
        return result

    def _draw_start(self, region: RegionRequest, length: int) -> int:
        return int(self.rng.integers(region.length - length + 1)) + region.start

    def _draw_length(self, sampler: LengthSampler, region: RegionRequest,
                     stats: RegionStats) -> int:
        """Redraw until the length fits inside the region."""
        misses = 0
        while True:
            length = sampler.sample()
            if length <= region.length:
                return length
            stats.rejected_draws += 1
            misses += 1
            if misses >= MAX_CONSECUTIVE_REJECTIONS:
                raise GeometryError(
                    f"region {region.label} ({region.length} bp) is shorter than "
                    f"{misses} consecutive length draws"
                )

    def _note_failure(self, region: RegionRequest, stats: RegionStats,
                      failures: int, error: ArchiveReadError) -> int:
        failures += 1
        stats.failed_draws += 1
        logger.warning(f"Draw failed in {region.label}: {error}")
        if failures >= MAX_CONSECUTIVE_FAILURES:
            raise ArchiveReadError(
                f"giving up on {region.label} after {failures} consecutive read failures"
            ) from error
        return failures

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def simulate(self, record: IndexRecord, region: RegionRequest) -> RegionStats:
        """Simulate one resolved region in single- or paired-end mode."""
        self.extractor.check_region(record, region.start, region.end)
        if self.settings.paired:
            return self.simulate_paired(record, region)
        return self.simulate_single(record, region)

    def simulate_single(self, record: IndexRecord, region: RegionRequest) -> RegionStats:
        length_cfg = self.settings.read_length
        if region.length < length_cfg.min_length:
            raise GeometryError(
                f"region {region.label} ({region.length} bp) is too short for "
                f"minimum read length {length_cfg.min_length}"
            )
        if length_cfg.is_fixed and length_cfg.mean > region.length:
            raise GeometryError(
                f"region {region.label} ({region.length} bp) is too short for "
                f"fixed read length {length_cfg.mean}"
            )

        sampler = LengthSampler(length_cfg, self.rng)
        stats = RegionStats(region)
        target = region.length * self.settings.coverage_depth
        failures = 0

        logger.debug(f"Simulating {region.label} to {target:.0f} bases (single-end)")

        while stats.bases_simulated < target:
            length = self._draw_length(sampler, region, stats)
            start = self._draw_start(region, length)
            end = start + length

            try:
                bases = self.extractor.extract_bases(record, start, end)
            except ArchiveReadError as e:
                failures = self._note_failure(region, stats, failures, e)
                continue
            failures = 0

            strand = '+'
            if self.rng.random() < 0.5:
                bases = reverse_complement(bases)
                strand = '-'

            read_id = f"{record.seq_id}_{start}_{end}_({strand})"
            result = self._mutate(read_id, bases)
            quality = self.score(result.bases, result.error_mask)

            self.emit(ReadRecord(read_id, result.bases, quality, strand))
            stats.reads_emitted += 1
            stats.mutations += len(result.mutation_log)
            stats.bases_simulated += length

        return stats

    def simulate_paired(self, record: IndexRecord, region: RegionRequest) -> RegionStats:
        mate_len = self.settings.mate_length
        fragment_cfg = self.settings.fragment_length
        if region.length < fragment_cfg.min_length:
            raise GeometryError(
                f"region {region.label} ({region.length} bp) is too short for "
                f"paired-end reads of {mate_len} bp"
            )

        sampler = LengthSampler(fragment_cfg, self.rng)
        stats = RegionStats(region)
        target = region.length * self.settings.coverage_depth
        failures = 0

        logger.debug(f"Simulating {region.label} to {target:.0f} bases (paired-end)")

        while stats.bases_simulated < target:
            frag_len = self._draw_length(sampler, region, stats)
            start = self._draw_start(region, frag_len)
            end = start + frag_len

            byte_start, byte_end = byte_offset(start, record), byte_offset(end, record)
            try:
                bases = self.extractor.extract(byte_start, byte_end)
            except ArchiveReadError as e:
                failures = self._note_failure(region, stats, failures, e)
                continue
            failures = 0

            fragment = FragmentSample(record.seq_id, start, end, byte_start, byte_end, bases)
            base_id = f"{record.seq_id}_{start}_{end}"

            for mate, strand, mate_bases in (
                (1, '+', fragment.read1_bases(mate_len)),
                (2, '-', fragment.read2_bases(mate_len)),
            ):
                read_id = f"{base_id}/{mate}"
                result = self._mutate(read_id, mate_bases)
                quality = self.score(result.bases, result.error_mask)
                self.emit(ReadRecord(read_id, result.bases, quality, strand, mate))
                stats.reads_emitted += 1
                stats.mutations += len(result.mutation_log)

            stats.bases_simulated += frag_len

        return stats

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
