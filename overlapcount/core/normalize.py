# -*- coding: utf-8 -*-

# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Expression normalization: FPKM and TPM from gene counts.

Both need whole-dataset sums (total counts for RPM, total RPK for TPM), so
the table is built once after every fragment has been counted.

Values that cannot be computed are NaN rather than 0:

- every RPM/FPKM/TPM when no fragment was assigned to any gene,
- FPKM/TPM of a gene with zero effective length.
"""
import logging as lg

import numpy as np
import pandas as pd

OUTPUT_COLUMNS = [
    'gene_id', 'counts', 'chrom', 'start', 'end',
    'full_length_kb', 'effective_length_kb', 'fpkm', 'tpm',
]


def expression_table(counts, genes):
    """Build the per-gene expression table.

    Args:
        counts: Mapping (or CountAccumulator) of gene_id -> fragment count.
        genes: dict of gene_id -> Gene.

    Returns:
        pandas.DataFrame with ``OUTPUT_COLUMNS``, one row per gene, sorted
        by gene id.
    """
    gene_ids = sorted(genes)
    raw_counts = np.array([counts[g] for g in gene_ids], dtype=np.float64)
    lengths_kb = np.array([genes[g].effective_length_kb for g in gene_ids], dtype=np.float64)
    total_mapped = raw_counts.sum()
    valid_len = lengths_kb > 0

    if total_mapped == 0:
        lg.warning('No fragments were assigned to any gene. FPKM and TPM are NaN.')
    if not valid_len.all():
        lg.warning('{} genes have zero effective length. Their FPKM and TPM are NaN.'.format(
            int((~valid_len).sum())))

    # RPM: reads per million assigned fragments
    rpm = np.full_like(raw_counts, np.nan)
    if total_mapped > 0:
        rpm = raw_counts / (total_mapped / 1e6)

    fpkm = np.full_like(raw_counts, np.nan)
    fpkm[valid_len] = rpm[valid_len] / lengths_kb[valid_len]

    # TPM: rate = count / length, then rates scaled to sum to 1M
    rpk = np.full_like(raw_counts, np.nan)
    rpk[valid_len] = raw_counts[valid_len] / lengths_kb[valid_len]
    rpk_sum = np.nansum(rpk)
    tpm = np.full_like(raw_counts, np.nan)
    if rpk_sum > 0:
        tpm = rpk / (rpk_sum / 1e6)

    df = pd.DataFrame({
        'gene_id': gene_ids,
        'counts': raw_counts.astype(np.int64),
        'chrom': [genes[g].chrom for g in gene_ids],
        'start': [genes[g].full_span.start for g in gene_ids],
        'end': [genes[g].full_span.end for g in gene_ids],
        'full_length_kb': [genes[g].full_length_kb for g in gene_ids],
        'effective_length_kb': lengths_kb,
        'fpkm': fpkm,
        'tpm': tpm,
    })
    return df[OUTPUT_COLUMNS]
