# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

from collections import Counter

import pandas as pd


class CountAccumulator:
    """Per-gene fragment counts, zero for every annotated gene."""

    def __init__(self, gene_ids):
        self._counts = Counter({gid: 0 for gid in gene_ids})

    def record(self, gene_id):
        if gene_id not in self._counts:
            raise KeyError(f'Gene "{gene_id}" is not in the annotation')
        self._counts[gene_id] += 1

    def merge(self, other):
        """New accumulator holding the gene-wise sum of ``self`` and ``other``."""
        ret = CountAccumulator(list(self._counts) + [g for g in other._counts if g not in self._counts])
        for src in (self, other):
            for gid, n in src._counts.items():
                ret._counts[gid] += n
        return ret

    def __getitem__(self, gene_id):
        return self._counts[gene_id]

    def __len__(self):
        return len(self._counts)

    def items(self):
        return self._counts.items()

    @property
    def total(self):
        return sum(self._counts.values())

    def as_series(self):
        return pd.Series(dict(self._counts), dtype='int64', name='counts').sort_index()
