# -*- coding: utf-8 -*-

# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

""" Overlapcount count

"""
import errno
import logging as lg
import os
import sys
from time import time

from . import SubcommandOptions, configure_logging
from .console import Stopwatch
from ..annotation import AnnotationIndex
from ..core.config import ConfigurationError, CountConfig
from ..core.model import OverlapCounter
from ..core.reporter import default_output_path, write_table
from ..utils.helpers import format_minutes as fmtmins


class CountOptions(SubcommandOptions):

    OPTS = """
    - Input Options:
        - bam:
            positional: True
            help: Path to alignment file (BAM or SAM). For paired-end data the
                  file should be collated or coordinate sorted so mates can be
                  joined. Parallel counting needs a coordinate-sorted, indexed
                  BAM.
        - gtf:
            positional: True
            help: Path to annotation file in GTF format. A GFF3 file can be
                  converted first, e.g. with gffread annotation.gff3 -T -o
                  annotation.gtf
        - attribute:
            default: gene_id
            help: GTF attribute that groups exons into genes.
    - Output Options:
        - out:
            help: Output file name (CSV). If not given, the output is written
                  next to the input with extension '.cts.csv'.
    - Counting Options:
        - mode:
            default: Union
            help: >
                  Method for counting reads overlapping the exons. One of
                  (case-sensitive) Union, IntersectionStrict,
                  IntersectionNotEmpty.
        - single:
            action: store_true
            help: Library is single-end.
        - stranded:
            action: store_true
            help: Library is strand-specific. Fragments only count towards
                  genes on the same strand.
        - fragments:
            action: store_true
            help: Also count singletons, reads with an unmapped mate and
                  mates of same-strand pairs, each as its own fragment
                  (paired-end only).
        - mapqFilter:
            type: int
            default: 0
            help: Minimum mapping quality of a read to be counted.
        - ncpu:
            type: int
            default: 1
            help: Number of processes. More than one splits the work by
                  chromosome and requires an indexed BAM.
    - Reporting Options:
        - quiet:
            action: store_true
            help: Silence (most) output.
        - verbose:
            action: store_true
            help: Show detailed progress and timing.
        - debug:
            action: store_true
            help: Print debug messages.
        - logfile:
            type: argparse.FileType('w')
            help: Log output to this file.
    """

    def __init__(self, args):
        super().__init__(args)
        if self.logfile is None:
            self.logfile = sys.stderr

    def check_inputs(self):
        """Check input and output paths before anything is loaded."""
        if not os.path.exists(self.bam):
            raise FileNotFoundError(errno.ENOENT, 'Bam file could not be found', self.bam)
        if not os.path.exists(self.gtf):
            raise FileNotFoundError(errno.ENOENT, 'GTF file could not be found', self.gtf)
        _ext = self.gtf[:-3] if self.gtf.endswith('.gz') else self.gtf
        if os.path.splitext(_ext)[1] != '.gtf':
            raise ConfigurationError(
                f'The annotation file has to be GTF format. Your file\'s extension is: {os.path.splitext(_ext)[1]}'
            )

        if self.out is None:
            self.out = default_output_path(self.bam)
            lg.warning(f'No output file provided. Will save the file as: {self.out}')
        else:
            _outdir = os.path.dirname(os.path.abspath(self.out))
            if not os.path.isdir(_outdir):
                raise FileNotFoundError(errno.ENOENT, 'Output directory does not exist', _outdir)


def run(args):
    """Count fragments per gene and write the expression table.

    Args:
        args: Parsed argparse namespace.

    Returns:
        The expression table as a pandas DataFrame.
    """
    opts = CountOptions(args)
    console = configure_logging(opts)
    config = CountConfig.from_opts(opts)
    opts.check_inputs()
    lg.info('\n{}\n'.format(opts))
    total_time = time()
    stopwatch = Stopwatch()

    console.banner(opts.version)
    console.section('Input')
    console.item('BAM', os.path.basename(opts.bam))
    console.item('Annotation', os.path.basename(opts.gtf))
    console.item('Mode', config.mode)
    console.item('Library', '{}{}'.format(
        'single-end' if config.single_end else 'paired-end',
        ', stranded' if config.stranded else ''))
    if config.mapq_filter > 0:
        console.item('Min MAPQ', config.mapq_filter)
    console.blank()

    lg.info('Reading annotation file...')
    stopwatch.start('Annotation')
    stime = time()
    annot = AnnotationIndex.from_gtf(opts.gtf, opts.attribute)
    lg.info('Loaded annotation in {}'.format(fmtmins(time() - stime)))
    lg.info('There are {} genes in your annotation.'.format(len(annot)))
    console.status('Loading annotation... done ({:,} genes)'.format(len(annot)))

    lg.info('Counting reads...')
    stopwatch.start('Counting')
    stime = time()
    counter = OverlapCounter(config, annot, console=console)
    console.status('Counting fragments...')
    counter.count_bam(opts.bam)
    lg.info('Counted fragments in {}'.format(fmtmins(time() - stime)))
    counter.print_summary(lg.INFO)

    stopwatch.start('Normalization')
    df = counter.expression_table()

    lg.info('Writing output to: {}'.format(opts.out))
    stopwatch.start('Output')
    write_table(df, opts.out)
    stopwatch.stop()

    console.blank()
    console.section('Output')
    console.detail(opts.out)
    console.blank()
    if console.level >= console.VERBOSE:
        console.timing_table(stopwatch)
        console.blank()
    console.status('Completed in {:.1f}s'.format(time() - total_time))
    lg.info("overlapcount count complete (%s)" % fmtmins(time() - total_time))
    return df
