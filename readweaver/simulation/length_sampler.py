#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Read and fragment length sampling.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
import math
from typing import Optional

import numpy as np

from .models import LengthModelConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10_000


class LengthSampler:
    """
    Draw lengths from a fixed value or a normal distribution truncated to
    ``[min_length, max_length]`` by rejection.

    Rejection is bounded: after ``max_attempts`` consecutive misses the
    sampler warns once and returns ``mean`` clamped into range from then on.
    """

    def __init__(self, config: LengthModelConfig, rng: np.random.Generator,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.config = config
        self.rng = rng
        self.max_attempts = max_attempts
        self._fallback: Optional[int] = None

    def _clamped_mean(self) -> int:
        cfg = self.config
        return min(max(cfg.mean, cfg.min_length), cfg.max_length)

    def sample(self) -> int:
        cfg = self.config
        if cfg.is_fixed:
            return cfg.mean
        if self._fallback is not None:
            return self._fallback

        for _ in range(self.max_attempts):
            # Box-Muller; u1 in (0, 1] keeps the log finite
            u1 = 1.0 - self.rng.random()
            u2 = self.rng.random()
            z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
            length = int(z * cfg.std_dev) + cfg.mean
            if cfg.min_length <= length <= cfg.max_length:
                return length

        self._fallback = self._clamped_mean()
        logger.warning(
            f"Length model mean={cfg.mean} sd={cfg.std_dev} rarely lands in "
            f"[{cfg.min_length}, {cfg.max_length}]; using {self._fallback} "
            f"after {self.max_attempts} rejected draws"
        )
        return self._fallback

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
