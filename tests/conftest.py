#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Pytest configuration and shared fixtures.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import pytest
from pathlib import Path
import tempfile
import shutil

import numpy as np


def write_fasta(path, sequences, width=60, newline='\n'):
    """Write ``{id: sequence}`` as a FASTA file wrapped at ``width`` bases."""
    with open(path, 'w', newline='') as f:
        for seq_id, seq in sequences.items():
            f.write(f">{seq_id}{newline}")
            for i in range(0, len(seq), width):
                f.write(seq[i:i + width] + newline)
    return Path(path)


def random_sequence(length, seed=0):
    rng = np.random.default_rng(seed)
    return ''.join(rng.choice(list('ACGT'), size=length))


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="readweaver_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fasta_writer():
    """The write_fasta helper, for tests that lay out their own FASTA files."""
    return write_fasta


@pytest.fixture
def reference_sequences():
    """Two random sequences: chr1 (1000 bp) and chr2 (300 bp)."""
    return {
        'chr1': random_sequence(1000, seed=1),
        'chr2': random_sequence(300, seed=2),
    }


@pytest.fixture
def reference_fasta(temp_output_dir, reference_sequences):
    """Reference FASTA wrapped at 60 bases per line (not yet indexed)."""
    return write_fasta(temp_output_dir / "reference.fa", reference_sequences)


@pytest.fixture
def simple_fasta():
    """Generate simple FASTA sequence for testing."""
    return ">test_sequence\nATCGATCGATCGATCGATCGATCGATCGATCG\n"

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
