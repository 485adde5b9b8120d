"""
ReadWeaver v0.1.0

Read simulation core:
- Coordinate resolution and region extraction
- Length sampling
- Error injection
- Quality synthesis
- Coverage-driven sampling loop and multi-region runner

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from .models import (
    ArchiveReadError,
    ConfigurationError,
    ErrorModelConfig,
    FastaIndexError,
    FragmentSample,
    GeometryError,
    IndexRecord,
    LengthModelConfig,
    MutationEvent,
    MutationResult,
    QualityProfile,
    ReadRecord,
    ReadWeaverError,
    RegionRequest,
    RegionStats,
    RunSummary,
    SequenceLookupError,
    SimulationSettings,
)
from .coordinates import RegionExtractor, byte_offset
from .length_sampler import LengthSampler
from .error_model import ErrorInjector
from .quality import long_read_quality, quality_model, short_read_quality
from .read_simulator import RegionSimulator
from .runner import SimulationRunner, plan_regions, region_seed

__all__ = [
    "ArchiveReadError",
    "ConfigurationError",
    "ErrorModelConfig",
    "FastaIndexError",
    "FragmentSample",
    "GeometryError",
    "IndexRecord",
    "LengthModelConfig",
    "MutationEvent",
    "MutationResult",
    "QualityProfile",
    "ReadRecord",
    "ReadWeaverError",
    "RegionRequest",
    "RegionStats",
    "RunSummary",
    "SequenceLookupError",
    "SimulationSettings",
    "RegionExtractor",
    "byte_offset",
    "LengthSampler",
    "ErrorInjector",
    "long_read_quality",
    "quality_model",
    "short_read_quality",
    "RegionSimulator",
    "SimulationRunner",
    "plan_regions",
    "region_seed",
]
