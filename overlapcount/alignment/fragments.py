# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Turn a stream of alignment records into countable fragments."""

import logging as lg
from collections import Counter, OrderedDict

from .records import Fragment

# Exclusion reasons tallied in FragmentAssembler.stats
EXCLUSIONS = [
    ('secondary', 'Non-primary alignments'),
    ('low_mapq', 'Below mapping quality threshold'),
    ('singleton_dropped', 'Mate missing or unpaired (not counting fragments)'),
    ('same_strand', 'Mates on the same strand (not counting fragments)'),
    ('non_concordant', 'Mates on different chromosomes'),
    ('zero_length', 'Zero-length alignments'),
    ('unknown_chrom', 'Chromosome not in annotation'),
]


class FragmentAssembler:
    """Filter alignment records and join mates into fragments.

    Records are processed in arrival order. In paired mode a record waits in
    a buffer keyed by read name until its mate arrives; whatever is still
    buffered when the input ends is treated as a read whose mate is missing.

    Args:
        config: CountConfig with ``single_end``, ``count_fragments`` and
            ``mapq_filter``.
        known_chrom: Callable returning True for chromosomes present in the
            annotation. If None every chromosome is accepted.
    """

    def __init__(self, config, known_chrom=None):
        self.config = config
        self.known_chrom = known_chrom
        self.stats = Counter()
        self._pending = OrderedDict()

    def assemble(self, records):
        """Yield fragments from ``records``. Each call starts a fresh buffer."""
        self._pending = OrderedDict()
        for rec in records:
            self.stats['records'] += 1
            for frag in self._process(rec):
                yield from self._checked(frag)

        if self._pending:
            lg.debug(f'{len(self._pending)} reads left without a mate at end of input')
        for rec in self._pending.values():
            for frag in self._singleton(rec):
                yield from self._checked(frag)
        self._pending = OrderedDict()

    def _process(self, rec):
        if not rec.is_primary:
            self.stats['secondary'] += 1
            return
        if rec.mapq < self.config.mapq_filter:
            self.stats['low_mapq'] += 1
            return

        if self.config.single_end:
            yield _fragment(rec)
            return

        if not rec.paired or not rec.mate_present:
            yield from self._singleton(rec)
            return
        if rec.mate_chrom is not None and rec.mate_chrom != rec.chrom:
            self.stats['non_concordant'] += 1
            return

        mate = self._pending.pop(rec.query_name, None)
        if mate is None:
            self._pending[rec.query_name] = rec
            return
        yield from self._join(mate, rec)

    def _join(self, a, b):
        if a.chrom != b.chrom:
            self.stats['non_concordant'] += 1
            return
        if a.strand == b.strand:
            yield from self._singleton(a, 'same_strand')
            yield from self._singleton(b, 'same_strand')
            return
        self.stats['pairs'] += 1
        r1 = a if a.is_read1 or not b.is_read1 else b
        yield Fragment(a.chrom, min(a.start, b.start), max(a.end, b.end), r1.strand, a.query_name)

    def _singleton(self, rec, reason='singleton_dropped'):
        if not self.config.count_fragments:
            self.stats[reason] += 1
            return
        self.stats['singletons'] += 1
        yield _fragment(rec)

    def _checked(self, frag):
        if frag.length <= 0:
            self.stats['zero_length'] += 1
            return
        if self.known_chrom is not None and not self.known_chrom(frag.chrom):
            self.stats['unknown_chrom'] += 1
            return
        self.stats['fragments'] += 1
        yield frag


def _fragment(rec):
    return Fragment(rec.chrom, rec.start, rec.end, rec.strand, rec.query_name)
