#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for ReadWeaver.

This module provides the main CLI entry point and all subcommands for
the ReadWeaver synthetic read simulator.
"""

import logging
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path

import click
from click.core import ParameterSource
import yaml

from .version import __version__
from .config.parser import ConfigParser
from .config.presets import PLATFORM_PRESETS, list_presets
from .config.schema import save_config_template
from .io.fasta_index import build_fasta_index, ensure_fasta_index
from .io.fastq_writer import FastqWriter, MutationLogWriter
from .simulation.models import (
    ConfigurationError,
    FastaIndexError,
    QualityProfile,
    RegionRequest,
)
from .simulation.runner import SimulationRunner

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# simulate option name -> dotted configuration key
OVERRIDE_KEYS = {
    'out_file': 'output.out_file',
    'depth': 'sequencing.depth',
    'error_rate': 'errors.substitution_rate',
    'indel_rate': 'errors.indel_rate',
    'ambig_rate': 'errors.ambiguous_rate',
    'cluster_bias': 'errors.cluster_bias',
    'gc_boost': 'errors.gc_boost',
    'max_indel_len': 'errors.max_indel_length',
    'homopolymer_multiplier': 'errors.homopolymer_multiplier',
    'read_len_mean': 'sequencing.read_length.mean',
    'read_len_stddev': 'sequencing.read_length.stddev',
    'read_len_min': 'sequencing.read_length.min',
    'read_len_max': 'sequencing.read_length.max',
    'quality_profile': 'sequencing.quality_profile',
    'paired': 'sequencing.paired',
    'frag_len_mean': 'sequencing.fragment_length.mean',
    'frag_len_stddev': 'sequencing.fragment_length.stddev',
    'split_reads': 'output.split_reads',
    'log_mutations': 'output.log_mutations',
    'mutation_log': 'output.mutation_log_file',
    'seed': 'execution.seed',
    'threads': 'execution.threads',
}


def setup_logging(level: str) -> None:
    """Route log records to stderr so FASTQ on stdout stays clean."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--quiet', '-q', is_flag=True, help='Only log errors')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    ReadWeaver: synthetic sequencing read simulator

    Samples reads or read pairs from a reference FASTA to a target coverage,
    with context-dependent substitution, indel and N errors and
    platform-shaped Phred quality strings.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    if verbose:
        setup_logging('DEBUG')
    elif quiet:
        setup_logging('ERROR')
    else:
        setup_logging('INFO')


# ============================================================================
# Simulation
# ============================================================================

@main.command()
@click.option('--input', '-i', 'reference', type=click.Path(exists=True, dir_okay=False),
              help='Reference FASTA (uncompressed; indexed on demand)')
@click.option('--out-file', '-o', type=click.Path(dir_okay=False),
              help='Output FASTQ (default: stdout; .gz suffix compresses)')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file (YAML)')
@click.option('--platform', '-p', type=click.Choice(list_presets(), case_sensitive=False),
              help='Platform preset applied under the config file and flags')
@click.option('--range', '-r', 'ranges', multiple=True, metavar='ID[,START[,END]]',
              help='Region to simulate (repeatable; default: every sequence)')
# ============================================================================
# Coverage and read geometry
# ============================================================================
@click.option('--depth', '-d', type=float, default=5.0, show_default=True,
              help='Target coverage depth per region')
@click.option('--read-len-mean', type=int, default=150, show_default=True,
              help='Mean read length')
@click.option('--read-len-stddev', type=int, default=0, show_default=True,
              help='Read length standard deviation (0 = fixed length)')
@click.option('--read-len-min', type=int, default=50, show_default=True,
              help='Minimum read length (also the mate length in paired-end mode)')
@click.option('--read-len-max', type=int, default=50000, show_default=True,
              help='Maximum read length')
@click.option('--paired', is_flag=True, help='Simulate paired-end reads')
@click.option('--frag-len-mean', type=int, default=600, show_default=True,
              help='Mean fragment length (paired-end)')
@click.option('--frag-len-stddev', type=int, default=150, show_default=True,
              help='Fragment length standard deviation (paired-end)')
@click.option('--split-reads', is_flag=True,
              help='Write mates to separate _R1/_R2 files (paired-end)')
# ============================================================================
# Error model
# ============================================================================
@click.option('--error-rate', type=float, default=0.0, show_default=True,
              help='Per-base substitution rate')
@click.option('--indel-rate', type=float, default=0.0, show_default=True,
              help='Per-base insertion/deletion rate')
@click.option('--ambig-rate', type=float, default=0.0, show_default=True,
              help='Per-base rate of ambiguous (N) calls')
@click.option('--cluster-bias', type=float, default=2.0, show_default=True,
              help='Error rate multiplier right after an error')
@click.option('--gc-boost', type=float, default=1.5, show_default=True,
              help='Substitution multiplier in GC-rich windows')
@click.option('--max-indel-len', type=int, default=3, show_default=True,
              help='Longest insertion and the deletion span')
@click.option('--homopolymer-multiplier', type=float, default=2.0, show_default=True,
              help='Indel multiplier inside homopolymer runs')
@click.option('--quality-profile', type=click.Choice([p.value for p in QualityProfile]),
              default='short', show_default=True,
              help='Quality score model')
# ============================================================================
# Output and execution
# ============================================================================
@click.option('--log-mutations', is_flag=True, help='Log every injected error')
@click.option('--mutation-log', type=click.Path(dir_okay=False),
              help='Mutation log file (implies --log-mutations; default: stderr)')
@click.option('--seed', type=click.IntRange(min=0),
              help='Random seed (default: random, logged)')
@click.option('--threads', '-t', type=click.IntRange(min=1), default=1, show_default=True,
              help='Regions simulated in parallel')
@click.pass_context
def simulate(ctx, reference, config_file, platform, ranges, **options):
    """
    Simulate reads from a reference FASTA.

    Settings are layered: built-in defaults, then the platform preset, then
    the configuration file, then flags given on the command line.

    Examples:
        # 10x single-end Illumina-like reads from one region
        readweaver simulate -i genome.fa -r chr1,0,100000 -d 10 --error-rate 0.002

        # Paired-end NovaSeq preset, split into reads_R1/reads_R2
        readweaver simulate -i genome.fa -p illumina_novaseq -o reads.fq.gz
    """
    try:
        parser = ConfigParser(config_file, platform=platform)

        overrides = {
            OVERRIDE_KEYS[name]: value
            for name, value in options.items()
            if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE
        }
        if 'output.mutation_log_file' in overrides:
            overrides['output.log_mutations'] = True
        if reference:
            overrides['input.reference'] = reference
        if ranges:
            overrides['input.ranges'] = list(ranges)
        parser.merge_cli_overrides(overrides)

        settings = parser.to_settings()

        reference = parser.get('input.reference')
        if not reference:
            raise ConfigurationError("no reference FASTA given (--input or input.reference)")
        if not Path(reference).is_file():
            raise ConfigurationError(f"reference FASTA not found: {reference}")

        try:
            requests = [RegionRequest.parse(str(r)) for r in parser.get('input.ranges') or []]
        except ValueError as e:
            raise ConfigurationError(f"invalid --range: {e}") from e
    except (ConfigurationError, FileNotFoundError) as e:
        click.echo(f"✗ {e}", err=True)
        ctx.exit(2)

    if not (ctx.obj.get('VERBOSE') or ctx.obj.get('QUIET')):
        setup_logging(parser.get('output.logging.level', 'INFO'))

    try:
        index = ensure_fasta_index(reference)
    except (FastaIndexError, OSError) as e:
        click.echo(f"✗ Cannot index {reference}: {e}", err=True)
        ctx.exit(1)

    out_file = parser.get('output.out_file')
    log_writer = (MutationLogWriter(parser.get('output.mutation_log_file'))
                  if settings.log_mutations else None)
    try:
        with FastqWriter(out_file, split=settings.split_reads) as writer:
            runner = SimulationRunner(reference, index, settings, writer, log_writer)
            summary = runner.run(requests)
    except ConfigurationError as e:
        click.echo(f"✗ {e}", err=True)
        ctx.exit(2)
    finally:
        if log_writer is not None:
            log_writer.close()

    click.echo(
        f"✓ Simulated {summary.reads_emitted:,} reads "
        f"({summary.bases_simulated:,} bases sampled) from "
        f"{len(summary.regions_processed)} region(s), seed {summary.seed}",
        err=True,
    )
    if out_file:
        for path in writer.paths:
            click.echo(f"  Output: {path}", err=True)
    if summary.regions_failed:
        click.echo(f"⚠ {len(summary.regions_failed)} region(s) skipped:", err=True)
        for label, reason in summary.regions_failed:
            click.echo(f"  • {label}: {reason}", err=True)
        if not summary.regions_processed:
            ctx.exit(1)


@main.command()
@click.argument('fasta', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Index path (default: <fasta>.fai)')
@click.pass_context
def index(ctx, fasta, output):
    """Build the .fai index for a FASTA file."""
    try:
        records = build_fasta_index(fasta, output)
    except (FastaIndexError, OSError) as e:
        click.echo(f"✗ Error indexing {fasta}: {e}", err=True)
        ctx.exit(1)

    total = sum(r.seq_len for r in records)
    click.echo(f"✓ Indexed {len(records)} sequence(s), {total:,} bases")
    for record in records:
        click.echo(f"  {record.seq_id}: {record.seq_len:,} bp")


@main.command()
def presets():
    """List platform presets and their key parameters."""
    click.echo(f"{'Preset':<18} {'Profile':<8} {'Read length':<22} {'Mode':<7} "
               f"{'Subst':>7} {'Indel':>7}")
    click.echo("-" * 74)
    for name, preset in PLATFORM_PRESETS.items():
        seq = preset['sequencing']
        rl = seq['read_length']
        length = f"{rl['mean']}+-{rl['stddev']} [{rl['min']}-{rl['max']}]"
        mode = 'paired' if seq['paired'] else 'single'
        err = preset['errors']
        click.echo(f"{name:<18} {seq['quality_profile']:<8} {length:<22} {mode:<7} "
                   f"{err['substitution_rate']:>7g} {err['indel_rate']:>7g}")


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='readweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t',
              type=click.Choice(['default'] + list_presets()),
              default='default', help='Configuration template (default or a platform preset)')
@click.pass_context
def config_init(ctx, output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        ctx.exit(1)

    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nEdit this file, then run:")
    click.echo(f"  readweaver simulate -i <reference.fa> -c {output}")


def _describe(parser: ConfigParser) -> None:
    """Print the settings that shape a run."""
    get = parser.get
    mode = 'paired-end' if get('sequencing.paired') else 'single-end'
    click.echo(f"  Platform: {get('sequencing.platform') or 'custom'}")
    click.echo(f"  Mode: {mode}, {get('sequencing.depth')}x, "
               f"{get('sequencing.quality_profile')} quality profile")
    click.echo(f"  Read length: {get('sequencing.read_length.mean')} "
               f"+- {get('sequencing.read_length.stddev')} "
               f"[{get('sequencing.read_length.min')}, {get('sequencing.read_length.max')}]")
    if get('sequencing.paired'):
        click.echo(f"  Fragment length: {get('sequencing.fragment_length.mean')} "
                   f"+- {get('sequencing.fragment_length.stddev')}")
    click.echo(f"  Errors: substitution {get('errors.substitution_rate')}, "
               f"indel {get('errors.indel_rate')}, N {get('errors.ambiguous_rate')}")
    click.echo(f"  Threads: {get('execution.threads')}, seed: {get('execution.seed')}")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def config_validate(ctx, config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        parser = ConfigParser(config_file)
        parser.validate()
    except ConfigurationError as e:
        click.echo(f"\n✗ {e}", err=True)
        ctx.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo("\nKey Settings:")
    _describe(parser)


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
@click.pass_context
def config_show(ctx, config_file, format):
    """Display configuration settings (defaults and preset merged in)."""
    try:
        parser = ConfigParser(config_file)
    except ConfigurationError as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        ctx.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(parser.to_dict(), default_flow_style=False, sort_keys=False))
    else:
        click.echo(f"Configuration from: {config_file}")
        click.echo("=" * 60)
        _describe(parser)


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"ReadWeaver v{__version__}")
    click.echo("\nDependencies:")

    for name, dist in (('NumPy', 'numpy'), ('Click', 'click'), ('PyYAML', 'PyYAML')):
        try:
            click.echo(f"  {name}: {package_version(dist)}")
        except PackageNotFoundError:
            click.echo(f"  {name}: not installed")


if __name__ == '__main__':
    sys.exit(main())
