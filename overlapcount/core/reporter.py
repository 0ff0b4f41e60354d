# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Writing the expression table."""

import logging as lg
import os
import tempfile


def default_output_path(bam_path):
    """``sample.bam`` -> ``sample.cts.csv`` next to the input."""
    return os.path.splitext(bam_path)[0] + '.cts.csv'


def write_table(df, out_path):
    """Write ``df`` as CSV, replacing ``out_path`` only once fully written.

    The table goes to a temporary file in the destination directory first,
    so an interrupted run never leaves a truncated table behind.
    """
    outdir = os.path.dirname(os.path.abspath(out_path))
    fd, tmp_path = tempfile.mkstemp(prefix='.overlapcount-', suffix='.csv', dir=outdir)
    try:
        with os.fdopen(fd, 'w', newline='') as outh:
            df.to_csv(outh, index=False, na_rep='NaN')
        os.replace(tmp_path, out_path)
    except BaseException:
        os.unlink(tmp_path)
        raise
    lg.info(f'Wrote {len(df)} rows to {out_path}')
