#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Run a simulation over many regions.

Each region gets its own random stream seeded with ``run_seed ^ region_index``
so a fixed seed reproduces every region exactly, whatever the worker count
or completion order. With more than one thread, regions are simulated in a
process pool; each worker spools its FASTQ (and mutation log) to a temporary
directory and the parent process, as the only writer, appends finished
spools to the real destinations.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
import tempfile
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..io.fastq_writer import FastqWriter, MutationLogWriter
from .coordinates import RegionExtractor
from .models import (
    ArchiveReadError,
    GeometryError,
    IndexRecord,
    ReadWeaverError,
    RegionRequest,
    RegionStats,
    RunSummary,
    SequenceLookupError,
    SimulationSettings,
)
from .read_simulator import RegionSimulator

logger = logging.getLogger(__name__)

SEED_MAX = 2 ** 32

PlannedRegion = Tuple[int, IndexRecord, RegionRequest]


def region_seed(run_seed: int, region_index: int) -> int:
    """Seed for one region's random stream."""
    return run_seed ^ region_index


def region_rng(run_seed: int, region_index: int) -> np.random.Generator:
    return np.random.default_rng(region_seed(run_seed, region_index))


def plan_regions(index: Dict[str, IndexRecord], requests: Sequence[RegionRequest],
                 summary: Optional[RunSummary] = None) -> List[PlannedRegion]:
    """
    Resolve requests against the index.

    Unknown sequence IDs and empty ranges are logged and skipped. The region
    index used for seeding is the request's position in ``requests``, so
    skipping one region never reseeds the others.
    """
    planned = []
    for idx, request in enumerate(requests):
        try:
            record = index.get(request.seq_id)
            if record is None:
                raise SequenceLookupError(
                    f"ID {request.seq_id} is not found in FASTA index"
                )
            planned.append((idx, record, request.resolve(record)))
        except SequenceLookupError as e:
            logger.warning(f"{e}. Skipping {request.label}.")
            if summary is not None:
                summary.regions_failed.append((request.label, str(e)))
        except GeometryError as e:
            logger.error(f"Skipping {request.label}: {e}")
            if summary is not None:
                summary.regions_failed.append((request.label, str(e)))
    return planned


def whole_archive_requests(index: Dict[str, IndexRecord]) -> List[RegionRequest]:
    """One request per indexed sequence, in index order."""
    return [RegionRequest(rec.seq_id, 0, rec.seq_len) for rec in index.values() if rec.seq_len > 0]


def _simulate_to_spool(reference: str, record: IndexRecord, region: RegionRequest,
                       settings: SimulationSettings, seed: int, spool_prefix: str,
                       with_log: bool) -> Tuple[RegionStats, List[Path], Optional[Path]]:
    """Process-pool worker: simulate one region into spool files."""
    log_path = Path(spool_prefix + '.log') if with_log else None
    with RegionExtractor.open(reference) as extractor, \
            FastqWriter(spool_prefix + '.fq', split=settings.split_reads) as spool:
        log_writer = MutationLogWriter(log_path) if log_path else None
        try:
            simulator = RegionSimulator(
                extractor, settings, np.random.default_rng(seed), spool.write,
                log_writer.write if log_writer else None,
            )
            stats = simulator.simulate(record, region)
        finally:
            if log_writer:
                log_writer.close()
    return stats, spool.paths, log_path


class SimulationRunner:
    """
    Drive :class:`RegionSimulator` across a list of regions.

    Example:
        with FastqWriter('reads.fq') as writer:
            runner = SimulationRunner('genome.fa', index, settings, writer)
            summary = runner.run([RegionRequest('chr1', 0, 10_000)])
    """

    def __init__(self, reference: Union[str, Path], index: Dict[str, IndexRecord],
                 settings: SimulationSettings, writer: FastqWriter,
                 log_writer: Optional[MutationLogWriter] = None):
        settings.validate()
        self.reference = str(reference)
        self.index = index
        self.settings = settings
        self.writer = writer
        self.log_writer = log_writer if settings.log_mutations else None

        if settings.seed is None:
            self.seed = int(np.random.default_rng().integers(SEED_MAX))
            logger.info(f"No seed given; using seed {self.seed}")
        else:
            self.seed = int(settings.seed)

    def run(self, requests: Optional[Sequence[RegionRequest]] = None) -> RunSummary:
        summary = RunSummary(seed=self.seed)
        if requests is None or len(requests) == 0:
            logger.info("No ranges given, simulating the entire FASTA file")
            requests = whole_archive_requests(self.index)

        planned = plan_regions(self.index, requests, summary)
        mode = 'paired-end' if self.settings.paired else 'single-end'
        logger.info(f"Simulating {len(planned)} region(s), {mode}, "
                    f"{self.settings.coverage_depth}x, {self.settings.threads} thread(s)")

        if self.settings.threads > 1 and len(planned) > 1:
            self._run_parallel(planned, summary)
        else:
            self._run_sequential(planned, summary)

        logger.info(f"Emitted {summary.reads_emitted:,} reads "
                    f"({summary.bases_simulated:,} sampled bases) from "
                    f"{len(summary.regions_processed)} region(s); "
                    f"{len(summary.regions_failed)} skipped")
        return summary

    def _record_failure(self, summary: RunSummary, region: RegionRequest,
                        error: ReadWeaverError) -> None:
        logger.error(f"Simulation failed for {region.label}: {error}")
        summary.regions_failed.append((region.label, str(error)))

    def _run_sequential(self, planned: List[PlannedRegion], summary: RunSummary) -> None:
        log_emit = self.log_writer.write if self.log_writer else None
        with RegionExtractor.open(self.reference) as extractor:
            for idx, record, region in planned:
                simulator = RegionSimulator(
                    extractor, self.settings, region_rng(self.seed, idx),
                    self.writer.write, log_emit,
                )
                try:
                    stats = simulator.simulate(record, region)
                except (GeometryError, ArchiveReadError) as e:
                    self._record_failure(summary, region, e)
                    continue
                summary.regions_processed.append(stats)
                logger.debug(f"{region.label}: {stats.reads_emitted} reads")

    def _run_parallel(self, planned: List[PlannedRegion], summary: RunSummary) -> None:
        with_log = self.log_writer is not None
        with tempfile.TemporaryDirectory(prefix="readweaver_spool_") as spool_dir, \
                ProcessPoolExecutor(max_workers=self.settings.threads) as executor:
            futures = {
                executor.submit(
                    _simulate_to_spool,
                    self.reference,
                    record,
                    region,
                    self.settings,
                    region_seed(self.seed, idx),
                    str(Path(spool_dir) / f"region_{idx}"),
                    with_log,
                ): region
                for idx, record, region in planned
            }

            for future in as_completed(futures):
                region = futures[future]
                try:
                    stats, spool_paths, log_path = future.result()
                except (GeometryError, ArchiveReadError) as e:
                    self._record_failure(summary, region, e)
                    continue
                self.writer.append_spools(spool_paths, stats.reads_emitted)
                if log_path is not None:
                    self.log_writer.append_spool(log_path)
                summary.regions_processed.append(stats)
                logger.debug(f"{region.label}: {stats.reads_emitted} reads")

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
