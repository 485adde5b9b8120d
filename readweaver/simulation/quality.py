#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Phred quality synthesis for short-read and long-read platforms.

Short reads ramp from Q30 to Q40 over the first 20 cycles, hold Q40 until
cycle 50 and decay back towards Q30. Long reads sit at a noisy Q10-Q20
baseline with occasional dips. Bases flagged as errors get low scores in
both profiles.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from typing import Callable

import numpy as np

from .models import QualityProfile

PHRED_OFFSET = 33

QualityModel = Callable[[str, np.ndarray], str]


def _encode(scores: np.ndarray) -> str:
    return (scores.astype(np.uint8) + PHRED_OFFSET).tobytes().decode('ascii')


def short_read_quality(sequence: str, error_mask: np.ndarray,
                       rng: np.random.Generator) -> str:
    """Illumina-style quality string for ``sequence``."""
    n = len(sequence)
    pos = np.arange(n, dtype=float)

    scores = np.full(n, 40.0)
    ramp = pos < 20
    scores[ramp] = 30.0 + 10.0 * pos[ramp] / 20.0
    tail = pos >= 50
    if tail.any():
        decay = 40.0 - (pos[tail] - 50.0) / (n - 50.0) * 10.0
        scores[tail] = np.maximum(decay, 30.0)
    scores = scores.astype(int)

    errors = np.asarray(error_mask, dtype=bool)
    scores[errors] = rng.integers(10, 16, size=int(errors.sum()))
    return _encode(scores)


def long_read_quality(sequence: str, error_mask: np.ndarray,
                      rng: np.random.Generator) -> str:
    """PacBio/ONT-style quality string for ``sequence``."""
    n = len(sequence)
    scores = rng.integers(10, 21, size=n)
    dips = rng.random(n) < 0.02
    scores[dips] -= rng.integers(0, 6, size=int(dips.sum()))
    scores = np.maximum(scores, 5)

    errors = np.asarray(error_mask, dtype=bool)
    scores[errors] = rng.integers(7, 11, size=int(errors.sum()))
    return _encode(scores)


_MODELS = {
    QualityProfile.SHORT: short_read_quality,
    QualityProfile.LONG: long_read_quality,
}


def quality_model(profile: QualityProfile, rng: np.random.Generator) -> QualityModel:
    """Bind a profile to a random stream once, outside the per-read loop."""
    model = _MODELS[profile]

    def score(sequence: str, error_mask: np.ndarray) -> str:
        return model(sequence, error_mask, rng)

    return score

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
