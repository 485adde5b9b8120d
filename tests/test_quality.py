#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Tests for quality string synthesis.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import numpy as np
from readweaver.simulation.models import QualityProfile
from readweaver.simulation.quality import (
    PHRED_OFFSET,
    long_read_quality,
    quality_model,
    short_read_quality,
)


def phred(quality):
    return [ord(c) - PHRED_OFFSET for c in quality]


class TestShortReadQuality:
    """Test the Illumina-style profile."""

    def test_error_free_shape(self):
        seq = "A" * 100
        scores = phred(short_read_quality(seq, np.zeros(100, dtype=bool), np.random.default_rng(0)))
        assert len(scores) == 100
        assert scores[0] == 30
        assert scores[10] == 35
        assert scores[19] == 39
        assert set(scores[20:50]) == {40}
        assert scores[50] == 40
        assert scores[99] == 30
        assert all(30 <= s <= 40 for s in scores)

    def test_short_read_has_no_tail(self):
        scores = phred(short_read_quality("A" * 30, np.zeros(30, dtype=bool),
                                          np.random.default_rng(0)))
        assert scores[20:] == [40] * 10

    def test_error_positions(self):
        mask = np.zeros(80, dtype=bool)
        mask[[3, 25, 70]] = True
        scores = phred(short_read_quality("C" * 80, mask, np.random.default_rng(1)))
        for i in (3, 25, 70):
            assert 10 <= scores[i] <= 15
        assert scores[30] == 40


class TestLongReadQuality:
    """Test the PacBio/ONT-style profile."""

    def test_baseline_range(self):
        n = 5000
        scores = phred(long_read_quality("A" * n, np.zeros(n, dtype=bool), np.random.default_rng(2)))
        assert len(scores) == n
        assert min(scores) >= 5
        assert max(scores) <= 20
        assert {10, 20} <= set(scores)

    def test_error_positions(self):
        n = 500
        mask = np.zeros(n, dtype=bool)
        mask[::5] = True
        scores = phred(long_read_quality("G" * n, mask, np.random.default_rng(3)))
        assert all(7 <= scores[i] <= 10 for i in range(0, n, 5))


class TestQualityModel:
    """Test profile dispatch."""

    def test_binds_profile(self):
        rng = np.random.default_rng(4)
        score = quality_model(QualityProfile.SHORT, rng)
        assert score("ACGT", np.zeros(4, dtype=bool)) == short_read_quality(
            "ACGT", np.zeros(4, dtype=bool), np.random.default_rng(0))

    def test_long_profile(self):
        score = quality_model(QualityProfile.LONG, np.random.default_rng(5))
        quality = score("A" * 50, np.zeros(50, dtype=bool))
        assert len(quality) == 50
        assert all(5 <= s <= 20 for s in phred(quality))

    def test_empty_read(self):
        score = quality_model(QualityProfile.SHORT, np.random.default_rng(6))
        assert score("", np.zeros(0, dtype=bool)) == ""

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
