#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Tests for multi-region runs: planning, seeding and parallel workers.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging

import pytest
from readweaver.io.fasta_index import build_fasta_index
from readweaver.io.fastq_writer import FastqWriter, MutationLogWriter
from readweaver.simulation.models import (
    ConfigurationError,
    ErrorModelConfig,
    LengthModelConfig,
    RegionRequest,
    RunSummary,
    SimulationSettings,
)
from readweaver.simulation.runner import (
    SimulationRunner,
    plan_regions,
    region_seed,
    whole_archive_requests,
)


@pytest.fixture
def index(reference_fasta):
    return {rec.seq_id: rec for rec in build_fasta_index(reference_fasta)}


def fastq_records(path):
    lines = path.read_text().splitlines()
    return [tuple(lines[i:i + 4]) for i in range(0, len(lines), 4)]


def run(reference_fasta, index, settings, requests, out_path, log_path=None):
    log_writer = MutationLogWriter(log_path) if log_path else None
    try:
        with FastqWriter(out_path, split=settings.split_reads) as writer:
            summary = SimulationRunner(reference_fasta, index, settings, writer,
                                       log_writer).run(requests)
    finally:
        if log_writer:
            log_writer.close()
    return summary


class TestRegionPlanning:
    """Test resolution of requests against the index."""

    def test_seed_per_region(self):
        assert region_seed(7, 0) == 7
        assert region_seed(7, 1) == 6
        assert region_seed(7, 2) == 5

    def test_unknown_id_skipped(self, index, caplog):
        summary = RunSummary(seed=0)
        with caplog.at_level(logging.WARNING):
            planned = plan_regions(index, [RegionRequest('chrX'), RegionRequest('chr2')], summary)
        assert [(idx, region.seq_id) for idx, _, region in planned] == [(1, 'chr2')]
        assert summary.regions_failed[0][0] == 'chrX:-'
        assert 'chrX' in caplog.text

    def test_open_bounds_resolved(self, index):
        planned = plan_regions(index, [RegionRequest('chr1', 900), RegionRequest('chr2', None, 10_000)])
        assert [(r.start, r.end) for _, _, r in planned] == [(900, 1000), (0, 300)]

    def test_empty_range_skipped(self, index):
        summary = RunSummary(seed=0)
        planned = plan_regions(index, [RegionRequest('chr2', 400, 500)], summary)
        assert planned == []
        assert len(summary.regions_failed) == 1

    def test_whole_archive(self, index):
        requests = whole_archive_requests(index)
        assert [(r.seq_id, r.start, r.end) for r in requests] == [('chr1', 0, 1000), ('chr2', 0, 300)]


class TestSimulationRunner:
    """Test end-to-end runs."""

    def test_whole_archive_when_no_ranges(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(read_length=LengthModelConfig(100, 0, 50, 500), seed=3)
        summary = run(reference_fasta, index, settings, [], temp_output_dir / "out.fq")
        assert [s.region.seq_id for s in summary.regions_processed] == ['chr1', 'chr2']
        records = fastq_records(temp_output_dir / "out.fq")
        assert len(records) == summary.reads_emitted == 50 + 15

    def test_failed_regions_do_not_abort_run(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(read_length=LengthModelConfig(150, 0, 50, 500), seed=3)
        requests = [
            RegionRequest('missing'),
            RegionRequest('chr2', 0, 100),   # shorter than the fixed read length
            RegionRequest('chr1', 0, 1000),
        ]
        summary = run(reference_fasta, index, settings, requests, temp_output_dir / "out.fq")
        assert [s.region.label for s in summary.regions_processed] == ['chr1:0-1000']
        assert {label for label, _ in summary.regions_failed} == {'missing:-', 'chr2:0-100'}
        assert summary.reads_emitted == 34

    @pytest.mark.parametrize("threads", [1, 2])
    def test_undecodable_region_isolated(self, temp_output_dir, threads):
        good = ''.join('ACGT'[(i * 7) % 4] for i in range(300))
        fasta = temp_output_dir / "mixed.fa"
        with open(fasta, 'wb') as f:
            f.write(b">bad\n" + (b"\xe9" * 60 + b"\n") * 2)
            f.write(b">good\n")
            for i in range(0, len(good), 60):
                f.write(good[i:i + 60].encode() + b"\n")
        index = {rec.seq_id: rec for rec in build_fasta_index(fasta)}

        settings = SimulationSettings(read_length=LengthModelConfig(50, 0, 10, 100),
                                      seed=9, threads=threads)
        summary = run(fasta, index, settings, [RegionRequest('bad'), RegionRequest('good')],
                      temp_output_dir / "out.fq")

        assert [label for label, _ in summary.regions_failed] == ['bad:0-120']
        assert [s.region.seq_id for s in summary.regions_processed] == ['good']
        assert len(fastq_records(temp_output_dir / "out.fq")) == 30

    def test_random_seed_chosen_and_reported(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(read_length=LengthModelConfig(100, 0, 50, 500))
        summary = run(reference_fasta, index, settings, [RegionRequest('chr2')],
                      temp_output_dir / "out.fq")
        assert isinstance(summary.seed, int)

    def test_fixed_seed_reproducible(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(
            error_model=ErrorModelConfig(substitution_rate=0.01, indel_rate=0.005),
            read_length=LengthModelConfig(120, 30, 50, 300),
            seed=42,
        )
        requests = [RegionRequest('chr1'), RegionRequest('chr2')]
        run(reference_fasta, index, settings, requests, temp_output_dir / "a.fq")
        run(reference_fasta, index, settings, requests, temp_output_dir / "b.fq")
        assert (temp_output_dir / "a.fq").read_text() == (temp_output_dir / "b.fq").read_text()

    def test_invalid_settings_rejected_up_front(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(error_model=ErrorModelConfig(substitution_rate=2.0))
        with FastqWriter(temp_output_dir / "out.fq") as writer:
            with pytest.raises(ConfigurationError):
                SimulationRunner(reference_fasta, index, settings, writer)

    def test_mutation_log_written(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(
            error_model=ErrorModelConfig(substitution_rate=0.05),
            log_mutations=True, seed=1,
        )
        summary = run(reference_fasta, index, settings, [RegionRequest('chr1')],
                      temp_output_dir / "out.fq", temp_output_dir / "mutations.txt")
        lines = (temp_output_dir / "mutations.txt").read_text().splitlines()
        assert lines
        assert len(lines) == sum(s.mutations for s in summary.regions_processed)
        assert all(' MUT ' in line for line in lines)


class TestParallelRuns:
    """Test process-pool execution."""

    def test_same_reads_regardless_of_threads(self, reference_fasta, index, temp_output_dir):
        base = dict(
            error_model=ErrorModelConfig(substitution_rate=0.01, indel_rate=0.01),
            read_length=LengthModelConfig(100, 20, 50, 200),
            seed=1234,
            log_mutations=True,
        )
        requests = [RegionRequest('chr1', 0, 500), RegionRequest('chr1', 500, 1000),
                    RegionRequest('chr2')]

        sequential = SimulationSettings(threads=1, **base)
        parallel = SimulationSettings(threads=3, **base)
        s1 = run(reference_fasta, index, sequential, requests,
                 temp_output_dir / "seq.fq", temp_output_dir / "seq.log")
        s2 = run(reference_fasta, index, parallel, requests,
                 temp_output_dir / "par.fq", temp_output_dir / "par.log")

        assert s1.reads_emitted == s2.reads_emitted
        assert sorted(fastq_records(temp_output_dir / "seq.fq")) == \
            sorted(fastq_records(temp_output_dir / "par.fq"))
        assert sorted((temp_output_dir / "seq.log").read_text().splitlines()) == \
            sorted((temp_output_dir / "par.log").read_text().splitlines())

    def test_parallel_split_output(self, reference_fasta, index, temp_output_dir):
        settings = SimulationSettings(
            read_length=LengthModelConfig(100, 0, 100, 150),
            fragment_mean=250, fragment_std_dev=20,
            paired=True, split_reads=True, seed=5, threads=2,
        )
        requests = [RegionRequest('chr1'), RegionRequest('chr2')]
        summary = run(reference_fasta, index, settings, requests, temp_output_dir / "pe.fq")

        r1 = fastq_records(temp_output_dir / "pe_R1.fq")
        r2 = fastq_records(temp_output_dir / "pe_R2.fq")
        assert len(r1) == len(r2) == summary.reads_emitted // 2
        assert all(rec[0].endswith('/1') for rec in r1)
        assert all(rec[0].endswith('/2') for rec in r2)

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
