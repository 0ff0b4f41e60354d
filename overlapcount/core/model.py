# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Overlapcount pipeline: fragment counting and orchestration.

A run is one pass over the alignments. With ``ncpu > 1`` and an indexed
BAM the pass is split by chromosome; each worker counts against its own
zero-initialised accumulator and the parent sums them before normalizing.
"""

import functools
import logging as lg
from collections import Counter, OrderedDict
from multiprocessing import Pool

from ..alignment.fragments import EXCLUSIONS, FragmentAssembler
from ..alignment.records import has_index, read_alignments, reference_names
from .counts import CountAccumulator
from .normalize import expression_table
from .resolver import AMBIGUOUS, NO_FEATURE, OverlapResolver


def _print_progress(nfrags, infolev=2500000):
    mfrags = nfrags / 1e6
    msg = f'...processed {mfrags:.1f}M fragments'
    if nfrags % infolev == 0:
        lg.info(msg)
    else:
        lg.debug(msg)


def count_records(records, annotation, config):
    """Count one stream of alignment records.

    Args:
        records: Iterable of AlignmentRecord.
        annotation: AnnotationIndex.
        config: CountConfig.

    Returns:
        (CountAccumulator, Counter of run statistics)
    """
    assembler = FragmentAssembler(config, annotation.has_chrom)
    resolve = OverlapResolver(annotation, config.mode, config.stranded).resolve
    counts = CountAccumulator(annotation.genes)

    alninfo = Counter()
    for frag in assembler.assemble(records):
        alninfo['total_fragments'] += 1
        if alninfo['total_fragments'] % 500000 == 0:
            _print_progress(alninfo['total_fragments'])

        feat = resolve(frag)
        if feat == NO_FEATURE:
            alninfo['no_feature'] += 1
        elif feat == AMBIGUOUS:
            alninfo['ambiguous'] += 1
        else:
            alninfo['assigned'] += 1
            counts.record(feat)

    alninfo.update(assembler.stats)
    return counts, alninfo


def fetch_region(samfile, annotation, config, chrom):
    """Count the alignments on one chromosome. Runs in a worker process."""
    _subannot = annotation.subregion([chrom])
    return count_records(read_alignments(samfile, region=chrom), _subannot, config)


class OverlapCounter:
    """Count fragments per gene and build the expression table.

    Args:
        config: CountConfig.
        annotation: AnnotationIndex, read-only for the whole run.
        console: Optional Console for progress output.
    """

    def __init__(self, config, annotation, console=None):
        self.config = config
        self.annotation = annotation
        self.console = console
        self.counts = None
        self.run_info = OrderedDict()
        self.run_info['annotated_genes'] = len(annotation)

    def count(self, records):
        """Count an in-memory or streamed sequence of AlignmentRecord."""
        counts, alninfo = count_records(records, self.annotation, self.config)
        self._finish(counts, alninfo)
        return self.counts

    def count_bam(self, samfile):
        if self.config.ncpu > 1:
            if has_index(samfile):
                counts, alninfo = self._count_parallel(samfile)
                self._finish(counts, alninfo)
                return self.counts
            lg.warning('Alignment file has no index, counting on a single core')
        return self.count(read_alignments(samfile))

    def _count_parallel(self, samfile):
        _in_bam = set(reference_names(samfile))
        chroms = [c for c in self.annotation.chroms if c in _in_bam]
        lg.info(f'Counting {len(chroms)} chromosomes on {self.config.ncpu} processes')

        counts = CountAccumulator(self.annotation.genes)
        alninfo = Counter()
        with Pool(processes=self.config.ncpu) as pool:
            _loadfunc = functools.partial(fetch_region, samfile, self.annotation, self.config)
            result = pool.map_async(_loadfunc, chroms)
            for part_counts, part_info in result.get():
                counts = counts.merge(part_counts)
                alninfo.update(part_info)
        return counts, alninfo

    def _finish(self, counts, alninfo):
        self.counts = counts
        for key in ['records', 'total_fragments', 'pairs', 'singletons', 'assigned', 'no_feature', 'ambiguous']:
            self.run_info[key] = alninfo[key]
        for key, _desc in EXCLUSIONS:
            self.run_info[key] = alninfo[key]
        if self.console is not None:
            self.console.detail('{:,} fragments{}{:,} assigned ({:,} no feature, {:,} ambiguous)'.format(
                alninfo['total_fragments'], self.console.dash, alninfo['assigned'],
                alninfo['no_feature'], alninfo['ambiguous']))

    def expression_table(self):
        if self.counts is None:
            raise RuntimeError('Fragments have not been counted yet')
        return expression_table(self.counts, self.annotation.genes)

    def print_summary(self, loglev=lg.WARNING):
        _d = Counter(self.run_info)
        lg.log(loglev, 'Counting Summary:')
        lg.log(loglev, '    {} alignment records read.'.format(_d['records']))
        for key, desc in EXCLUSIONS:
            lg.log(loglev, '        {} excluded: {}.'.format(_d[key], desc))
        lg.log(loglev, '--')
        lg.log(loglev, '    {} fragments counted; of these'.format(_d['total_fragments']))
        lg.log(loglev, '        {} from joined mate pairs.'.format(_d['pairs']))
        lg.log(loglev, '        {} from reads with a missing mate.'.format(_d['singletons']))
        lg.log(loglev, '--')
        lg.log(loglev, '    {} fragments assigned to {} genes.'.format(_d['assigned'], _d['annotated_genes']))
        lg.log(loglev, '        {} overlap no gene.'.format(_d['no_feature']))
        lg.log(loglev, '        {} are ambiguous.'.format(_d['ambiguous']))

    def __str__(self):
        return f'<OverlapCounter mode={self.config.mode}, genes={len(self.annotation)}>'
