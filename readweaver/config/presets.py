"""
ReadWeaver v0.1.0

Sequencing platform presets.

Each preset is a partial configuration in the YAML layout of
``DEFAULT_CONFIG`` and is deep-merged over the defaults.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from typing import Any, Dict, List

from ..simulation.models import ConfigurationError


def _preset(read_len, quality_profile, errors, paired, fragment=None, split_reads=False):
    mean, stddev, min_len, max_len = read_len
    sub, indel, ambig, cluster, gc, max_indel, homo = errors
    preset = {
        'sequencing': {
            'paired': paired,
            'quality_profile': quality_profile,
            'read_length': {'mean': mean, 'stddev': stddev, 'min': min_len, 'max': max_len},
        },
        'errors': {
            'substitution_rate': sub,
            'indel_rate': indel,
            'ambiguous_rate': ambig,
            'cluster_bias': cluster,
            'gc_boost': gc,
            'max_indel_length': max_indel,
            'homopolymer_multiplier': homo,
        },
        'output': {'split_reads': split_reads},
    }
    if fragment is not None:
        preset['sequencing']['fragment_length'] = {'mean': fragment[0], 'stddev': fragment[1]}
    return preset


# read_len = (mean, stddev, min, max)
# errors   = (substitution, indel, ambiguous, cluster_bias, gc_boost, max_indel, homopolymer)
PLATFORM_PRESETS: Dict[str, Dict[str, Any]] = {
    'illumina_hiseq': _preset(
        (150, 0, 150, 250), 'short',
        (0.001, 0.0001, 0.0, 1.5, 1.2, 1, 1.0),
        paired=True, fragment=(400, 50), split_reads=True,
    ),
    'illumina_novaseq': _preset(
        (250, 10, 200, 300), 'short',
        (0.002, 0.0005, 0.0005, 2.0, 1.3, 2, 1.5),
        paired=True, fragment=(600, 100), split_reads=True,
    ),
    'illumina_miseq': _preset(
        (250, 3, 243, 300), 'short',
        (0.002, 0.0003, 0.0002, 1.2, 1.1, 1, 1.1),
        paired=True, fragment=(540, 40), split_reads=False,
    ),
    'pacbio_hifi': _preset(
        (15000, 2000, 5000, 25000), 'long',
        (0.005, 0.002, 0.001, 1.2, 1.1, 3, 1.2),
        paired=False,
    ),
    'pacbio_ccs': _preset(
        (15000, 4000, 1000, 30000), 'long',
        (0.01, 0.001, 0.001, 1.5, 1.2, 2, 2.0),
        paired=False,
    ),
    'ont_minion': _preset(
        (8000, 2500, 1000, 20000), 'long',
        (0.08, 0.03, 0.005, 2.5, 1.5, 5, 3.5),
        paired=False,
    ),
    'ont_promethion': _preset(
        (12000, 3000, 2000, 30000), 'long',
        (0.07, 0.025, 0.003, 2.2, 1.4, 6, 3.2),
        paired=False,
    ),
}


def list_presets() -> List[str]:
    return list(PLATFORM_PRESETS)


def get_preset(name: str) -> Dict[str, Any]:
    """Look up a preset by case-insensitive name."""
    key = name.strip().lower()
    if key not in PLATFORM_PRESETS:
        raise ConfigurationError(
            f"Unknown platform preset: {name} (choose from {', '.join(PLATFORM_PRESETS)})"
        )
    return PLATFORM_PRESETS[key]
