#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Tests for read and fragment length sampling.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
import time

import numpy as np
import pytest
from readweaver.simulation.length_sampler import LengthSampler
from readweaver.simulation.models import ConfigurationError, LengthModelConfig


class TestFixedLength:
    """Test std_dev == 0."""

    def test_returns_mean(self):
        sampler = LengthSampler(LengthModelConfig(150, 0, 50, 500), np.random.default_rng(0))
        assert {sampler.sample() for _ in range(20)} == {150}

    def test_consumes_no_randomness(self):
        rng = np.random.default_rng(0)
        before = rng.bit_generator.state
        LengthSampler(LengthModelConfig(150), rng).sample()
        assert rng.bit_generator.state == before


class TestNormalLength:
    """Test normal draws with rejection."""

    def test_within_bounds(self):
        cfg = LengthModelConfig(1000, 300, 800, 1100)
        sampler = LengthSampler(cfg, np.random.default_rng(42))
        lengths = [sampler.sample() for _ in range(2000)]
        assert min(lengths) >= 800
        assert max(lengths) <= 1100

    def test_centred_on_mean(self):
        cfg = LengthModelConfig(5000, 500, 1, 50000)
        sampler = LengthSampler(cfg, np.random.default_rng(7))
        lengths = np.array([sampler.sample() for _ in range(5000)])
        assert abs(lengths.mean() - 5000) < 50
        assert 400 < lengths.std() < 600

    def test_deterministic_under_seed(self):
        cfg = LengthModelConfig(300, 40, 100, 500)
        a = LengthSampler(cfg, np.random.default_rng(5))
        b = LengthSampler(cfg, np.random.default_rng(5))
        assert [a.sample() for _ in range(50)] == [b.sample() for _ in range(50)]


class TestBoundedRejection:
    """Test the fallback when the window is practically unreachable."""

    def test_falls_back_to_clamped_mean(self, caplog):
        cfg = LengthModelConfig(1000, 1, 10, 20)
        sampler = LengthSampler(cfg, np.random.default_rng(1), max_attempts=50)
        with caplog.at_level(logging.WARNING):
            draws = [sampler.sample() for _ in range(3)]
        assert draws == [20, 20, 20]
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_fallback_is_sticky(self):
        rng = np.random.default_rng(1)
        sampler = LengthSampler(LengthModelConfig(1000, 1, 10, 20), rng)
        assert sampler.sample() == 20

        before = rng.bit_generator.state
        started = time.perf_counter()
        draws = {sampler.sample() for _ in range(10_000)}
        elapsed = time.perf_counter() - started

        assert draws == {20}
        assert rng.bit_generator.state == before
        assert elapsed < 1.0


class TestLengthModelValidation:
    """Test LengthModelConfig.validate."""

    def test_valid(self):
        LengthModelConfig(150, 10, 50, 500).validate()

    @pytest.mark.parametrize("cfg", [
        LengthModelConfig(0, 0, 1, 10),
        LengthModelConfig(100, -1, 1, 200),
        LengthModelConfig(100, 10, 300, 200),
        LengthModelConfig(100, 0, 150, 200),
    ])
    def test_invalid(self, cfg):
        with pytest.raises(ConfigurationError):
            cfg.validate()

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
