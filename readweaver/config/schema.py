"""
ReadWeaver v0.1.0

Configuration schema for ReadWeaver.

Defines all available configuration parameters with defaults and validation.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import copy
import logging
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..simulation.models import (
    ConfigurationError,
    ErrorModelConfig,
    LengthModelConfig,
    QualityProfile,
    SimulationSettings,
)
from .presets import PLATFORM_PRESETS, get_preset

logger = logging.getLogger(__name__)


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Input
    # ========================================================================
    'input': {
        'reference': None,  # Uncompressed FASTA; indexed on demand
        'ranges': [],  # "<id>[,<start>[,<end>]]"; empty = whole archive
    },

    # ========================================================================
    # Sequencing run
    # ========================================================================
    'sequencing': {
        'platform': None,  # Preset name, see `readweaver presets`
        'depth': 5,  # Target coverage per region
        'paired': False,
        'quality_profile': 'short',  # 'short' (Illumina) or 'long' (PacBio/ONT)
        'read_length': {
            'mean': 150,
            'stddev': 0,  # 0 = fixed length
            'min': 50,  # Also the mate length in paired-end mode
            'max': 50000,
        },
        'fragment_length': {
            'mean': 600,
            'stddev': 150,
        },
    },

    # ========================================================================
    # Error model
    # ========================================================================
    'errors': {
        'substitution_rate': 0.0,
        'indel_rate': 0.0,
        'ambiguous_rate': 0.0,  # Probability of emitting N
        'cluster_bias': 2.0,  # Multiplier after a previous error
        'gc_boost': 1.5,  # Substitution multiplier in > 60% GC windows
        'homopolymer_multiplier': 2.0,  # Indel multiplier in runs >= 3
        'max_indel_length': 3,
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'out_file': None,  # None = stdout; '.gz' suffix = gzip
        'split_reads': False,  # Paired-end only: separate _R1/_R2 files
        'log_mutations': False,
        'mutation_log_file': None,  # None = stderr

        # Logging
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
        },
    },

    # ========================================================================
    # Execution
    # ========================================================================
    'execution': {
        'threads': 1,  # Regions simulated in parallel
        'seed': None,  # None = random (logged for reproducibility)
    },
}

_RATE_KEYS = ('substitution_rate', 'indel_rate', 'ambiguous_rate')
_MULTIPLIER_KEYS = ('cluster_bias', 'gc_boost', 'homopolymer_multiplier')
_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def default_config() -> Dict[str, Any]:
    """Fresh, independent copy of the defaults."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    A ``sequencing.platform`` named in the file is applied underneath the
    file's own values.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = default_config()

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}

            platform = (user_config.get('sequencing') or {}).get('platform')
            if platform:
                config = apply_preset(config, platform)

            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def apply_preset(config: Dict[str, Any], platform: str) -> Dict[str, Any]:
    """Return ``config`` with a platform preset merged over it."""
    merged = _deep_merge(config, copy.deepcopy(get_preset(platform)))
    merged['sequencing']['platform'] = platform.strip().lower()
    return merged


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: 'default' or any platform preset name
    """
    config = default_config()

    if template != 'default':
        config = apply_preset(config, template)

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    seq = config.get('sequencing', {})
    err = config.get('errors', {})

    # Error model rates and multipliers
    for key in _RATE_KEYS:
        value = err.get(key)
        if not _is_number(value) or not 0.0 <= value <= 1.0:
            errors.append(f"errors.{key} must be between 0.0 and 1.0, got {value!r}")
    for key in _MULTIPLIER_KEYS:
        value = err.get(key)
        if not _is_number(value) or value < 1.0:
            errors.append(f"errors.{key} must be a number >= 1.0, got {value!r}")
    max_indel = err.get('max_indel_length')
    if not isinstance(max_indel, int) or isinstance(max_indel, bool) or max_indel < 1:
        errors.append(f"errors.max_indel_length must be an integer >= 1, got {max_indel!r}")

    # Length models
    read_len = seq.get('read_length', {})
    length_errors = len(errors)
    for key in ('mean', 'min', 'max'):
        value = read_len.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            errors.append(f"sequencing.read_length.{key} must be a positive integer, got {value!r}")
    stddev = read_len.get('stddev')
    if not isinstance(stddev, int) or isinstance(stddev, bool) or stddev < 0:
        errors.append(f"sequencing.read_length.stddev must be an integer >= 0, got {stddev!r}")
    if len(errors) == length_errors:
        if read_len['min'] > read_len['max']:
            errors.append("sequencing.read_length.min must not exceed sequencing.read_length.max")
        elif read_len['stddev'] == 0 and not read_len['min'] <= read_len['mean'] <= read_len['max']:
            errors.append("fixed sequencing.read_length.mean must lie within [min, max]")

    if seq.get('paired'):
        frag = seq.get('fragment_length', {})
        for key in ('mean', 'stddev'):
            value = frag.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"sequencing.fragment_length.{key} must be an integer >= 0, got {value!r}")

    # Run parameters
    depth = seq.get('depth')
    if not _is_number(depth) or depth <= 0:
        errors.append(f"sequencing.depth must be positive, got {depth!r}")

    profile = seq.get('quality_profile')
    valid_profiles = [p.value for p in QualityProfile]
    if str(profile).lower() not in valid_profiles:
        errors.append(f"Invalid quality_profile: {profile} (choose {' or '.join(valid_profiles)})")

    platform = seq.get('platform')
    if platform and str(platform).strip().lower() not in PLATFORM_PRESETS:
        errors.append(f"Unknown platform preset: {platform}")

    threads = config.get('execution', {}).get('threads')
    if not isinstance(threads, int) or isinstance(threads, bool) or threads < 1:
        errors.append(f"execution.threads must be an integer >= 1, got {threads!r}")

    seed = config.get('execution', {}).get('seed')
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool) or seed < 0):
        errors.append(f"execution.seed must be a non-negative integer, got {seed!r}")

    level = config.get('output', {}).get('logging', {}).get('level', 'INFO')
    if str(level).upper() not in _LOG_LEVELS:
        errors.append(f"Invalid logging level: {level}")

    return errors


def build_settings(config: Dict[str, Any]) -> SimulationSettings:
    """
    Convert a validated configuration dictionary into SimulationSettings.

    Raises:
        ConfigurationError: listing every validation error
    """
    errors = validate_config(config)
    if errors:
        raise ConfigurationError("Configuration validation failed:\n  " + "\n  ".join(errors))

    seq = config['sequencing']
    err = config['errors']
    out = config['output']
    execution = config['execution']
    read_len = seq['read_length']
    frag = seq['fragment_length']
    paired = bool(seq['paired'])
    split = paired and bool(out.get('split_reads'))
    if split and not out.get('out_file'):
        logger.warning("split_reads needs an output file; writing interleaved pairs to stdout")
        split = False

    settings = SimulationSettings(
        error_model=ErrorModelConfig(
            substitution_rate=float(err['substitution_rate']),
            indel_rate=float(err['indel_rate']),
            ambiguous_rate=float(err['ambiguous_rate']),
            cluster_bias=float(err['cluster_bias']),
            gc_boost=float(err['gc_boost']),
            homopolymer_multiplier=float(err['homopolymer_multiplier']),
            max_indel_length=int(err['max_indel_length']),
        ),
        read_length=LengthModelConfig(
            mean=read_len['mean'],
            std_dev=read_len['stddev'],
            min_length=read_len['min'],
            max_length=read_len['max'],
        ),
        fragment_mean=int(frag['mean']),
        fragment_std_dev=int(frag['stddev']),
        coverage_depth=float(seq['depth']),
        quality_profile=QualityProfile(str(seq['quality_profile']).lower()),
        paired=paired,
        split_reads=split,
        log_mutations=bool(out.get('log_mutations')),
        seed=execution.get('seed'),
        threads=execution['threads'],
    )
    settings.validate()
    return settings
