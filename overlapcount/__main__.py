#! /usr/bin/env python
# -*- coding: utf-8 -*-

# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

""" Main functionality of Overlapcount

"""
import sys
import argparse

from overlapcount import __version__
from .cli import count as cli_count


USAGE = ''' %(prog)s <command> [<args>]

The most commonly used commands are:
   count          Count fragments overlapping gene exons and compute FPKM/TPM

'''


def build_parser():
    parser = argparse.ArgumentParser(
        description='Count sequencing reads overlapping gene exons',
    )
    parser.add_argument('--version',
        action='version',
        version=__version__,
        default=__version__,
    )

    subparser = parser.add_subparsers(help='Sub-command help', dest='subcommand')

    ''' Parser for count '''
    count_parser = subparser.add_parser('count',
        description='''Count the reads overlapping the exons of each gene
                       and compute FPKM and TPM.''',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    cli_count.CountOptions.add_arguments(count_parser)
    count_parser.set_defaults(func=cli_count.run)
    return parser


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) == 0:
        empty_parser = argparse.ArgumentParser(
            description='Count sequencing reads overlapping gene exons',
            usage=USAGE,
        )
        empty_parser.print_help(sys.stderr)
        sys.exit(1)

    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == '__main__':
    main()
