#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Context-sensitive sequencing error injection.

One left-to-right pass over the source bases decides, per position, between
an ambiguous call (N), a substitution, an insertion or deletion, or a clean
copy. Rates are modulated by local context:

- substitution rate x gc_boost where the +/-7 bp window is more than 60% GC
- indel rate x homopolymer_multiplier inside a run of 3 or more identical bases
- both rates x cluster_bias right after a mutated position

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import logging
from typing import List, Optional

import numpy as np

from ..utils.sequence_utils import gc_window_fractions
from .models import ErrorModelConfig, MutationEvent, MutationResult

logger = logging.getLogger(__name__)

GC_FLANK = 7
GC_RICH_THRESHOLD = 0.6
HOMOPOLYMER_MIN_RUN = 3

_N = ord('N')
_BASES = np.frombuffer(b'ACGT', dtype=np.uint8)
_ALTERNATIVES = {
    ord('A'): b'CGT',
    ord('C'): b'AGT',
    ord('G'): b'ACT',
    ord('T'): b'ACG',
}


class ErrorInjector:
    """
    Apply an :class:`ErrorModelConfig` to raw reference bases.

    Example:
        injector = ErrorInjector(ErrorModelConfig(substitution_rate=0.01), rng)
        result = injector.inject("ACGTACGT")
        result.bases, result.error_mask, result.mutation_log
    """

    def __init__(self, config: ErrorModelConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng

    @property
    def is_error_free(self) -> bool:
        cfg = self.config
        return cfg.substitution_rate == 0 and cfg.indel_rate == 0 and cfg.ambiguous_rate == 0

    def _initial_capacity(self, n: int) -> int:
        cfg = self.config
        ceiling = cfg.indel_rate * cfg.homopolymer_multiplier * cfg.cluster_bias
        return int(n * (1 + cfg.max_indel_length * min(1.0, ceiling))) + cfg.max_indel_length

    def _substitute(self, base: int) -> int:
        choices = _ALTERNATIVES.get(base & 0xDF)  # uppercase ASCII letters
        if choices is None:
            choices = b'ACGT'
        return choices[int(self.rng.integers(len(choices)))]

    def _draws(self, rate: float, n: int) -> Optional[List[float]]:
        return self.rng.random(n).tolist() if rate > 0 else None

    def inject(self, bases: str) -> MutationResult:
        n = len(bases)
        if n == 0 or self.is_error_free:
            return MutationResult(bases, np.zeros(n, dtype=bool), [])

        cfg = self.config
        raw = bases.encode('ascii')
        gc_rich = (gc_window_fractions(bases, GC_FLANK) > GC_RICH_THRESHOLD).tolist()

        u_amb = self._draws(cfg.ambiguous_rate, n)
        u_sub = self._draws(cfg.substitution_rate, n)
        u_indel = self._draws(cfg.indel_rate, n)

        out = np.empty(self._initial_capacity(n), dtype=np.uint8)
        mask = np.zeros(len(out), dtype=bool)
        log: List[MutationEvent] = []
        k = 0

        last_error = False
        prev = -1
        run = 0
        i = 0
        while i < n:
            b = raw[i]
            if b == prev:
                run += 1
            else:
                run = 1
            prev = b

            sub_rate = cfg.substitution_rate
            indel_rate = cfg.indel_rate
            if gc_rich[i]:
                sub_rate *= cfg.gc_boost
            if run >= HOMOPOLYMER_MIN_RUN:
                indel_rate *= cfg.homopolymer_multiplier
            if last_error:
                sub_rate *= cfg.cluster_bias
                indel_rate *= cfg.cluster_bias

            # Room for the longest insertion plus the copied base
            if k + cfg.max_indel_length + 1 > len(out):
                out = np.concatenate((out, np.empty(len(out), dtype=np.uint8)))
                mask = np.concatenate((mask, np.zeros(len(mask), dtype=bool)))

            if u_amb is not None and u_amb[i] < cfg.ambiguous_rate:
                out[k] = _N
                mask[k] = True
                k += 1
                log.append(MutationEvent('ambiguous', i, chr(b), 'N'))
                last_error = True
                i += 1
                continue

            if u_sub is not None and u_sub[i] < sub_rate:
                alt = self._substitute(b)
                out[k] = alt
                mask[k] = True
                k += 1
                log.append(MutationEvent('substitution', i, chr(b), chr(alt)))
                last_error = True
                i += 1
                continue

            if u_indel is not None and u_indel[i] < indel_rate:
                last_error = True
                if u_indel[i] < indel_rate / 2:
                    del_len = min(cfg.max_indel_length, n - i)
                    log.append(MutationEvent('deletion', i, bases[i:i + del_len], ''))
                    i += del_len
                    continue

                ins_len = int(self.rng.integers(1, cfg.max_indel_length + 1))
                inserted = self.rng.choice(_BASES, size=ins_len)
                out[k:k + ins_len] = inserted
                mask[k:k + ins_len] = True
                k += ins_len
                log.append(MutationEvent('insertion', i, '', inserted.tobytes().decode('ascii')))
                out[k] = b
                k += 1
                i += 1
                continue

            out[k] = b
            k += 1
            last_error = False
            i += 1

        return MutationResult(out[:k].tobytes().decode('ascii'), mask[:k].copy(), log)

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
