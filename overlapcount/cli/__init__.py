# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

import argparse
import logging
from collections import OrderedDict

import yaml

from .console import Console

# Types an option table may name
_OPTION_TYPES = {
    'int': int,
    "argparse.FileType('w')": argparse.FileType('w'),
}

_LOG_FORMAT = '%(asctime)s %(levelname)-8s %(message)s'
_DEBUG_FORMAT = '%(asctime)s %(levelname)-8s %(message)-60s (%(funcName)s in %(filename)s:%(lineno)d)'


class SubcommandOptions:
    """Options of one subcommand, declared as a YAML table in ``OPTS``.

    ``OPTS`` is a list of argument groups, each a list of ``name: kwargs``
    entries passed to ``argparse``. Extra keys: ``positional`` makes a
    positional argument, ``type`` names an entry of ``_OPTION_TYPES``.
    """
    OPTS = """
    - Input Options:
        - infile:
            positional: True
            help: Input file.
    """

    def __init__(self, args):
        self.opt_groups = self.option_groups()
        for k, v in vars(args).items():
            setattr(self, k, v)

    @classmethod
    def option_groups(cls):
        """OrderedDict of group name -> OrderedDict of option name -> kwargs."""
        groups = OrderedDict()
        for grp in yaml.load(cls.OPTS, Loader=yaml.SafeLoader):
            grp_name, opts = list(grp.items())[0]
            groups[grp_name] = OrderedDict(list(o.items())[0] for o in opts)
        return groups

    @classmethod
    def add_arguments(cls, parser):
        for group_name, opts in cls.option_groups().items():
            argparse_grp = parser.add_argument_group(group_name, '')
            for opt_name, opt_d in opts.items():
                flag, kwargs = cls._argument(opt_name, opt_d)
                argparse_grp.add_argument(flag, **kwargs)

    @staticmethod
    def _argument(opt_name, opt_d):
        kwargs = dict(opt_d)
        if kwargs.pop('positional', False):
            flag = opt_name
        else:
            flag = f'--{opt_name}'
        if 'type' in kwargs:
            try:
                kwargs['type'] = _OPTION_TYPES[kwargs['type']]
            except KeyError:
                raise ValueError(f"Option '{opt_name}' has unsupported type '{kwargs['type']}'") from None
        return flag, kwargs

    def __str__(self):
        ret = []
        if hasattr(self, 'version'):
            ret.append('{:34}{}'.format('Version:', self.version))
        for group_name, opts in self.opt_groups.items():
            ret.append(group_name)
            for opt_name in opts:
                v = getattr(self, opt_name, 'Not set')
                ret.append('    {:30}{}'.format(opt_name + ':', getattr(v, 'name', v)))
        return '\n'.join(ret)


def configure_logging(opts):
    """Set up logging on stderr (or ``--logfile``) and return the stdout Console.

    Logging defaults to WARNING so a normal run only shows the Console.
    ``--verbose`` adds INFO messages, ``--debug`` adds DEBUG messages with
    their source location. ``--quiet`` silences the Console only.
    """
    if getattr(opts, 'debug', False):
        loglev, logfmt, console_level = logging.DEBUG, _DEBUG_FORMAT, Console.DEBUG
    elif getattr(opts, 'verbose', False):
        loglev, logfmt, console_level = logging.INFO, _LOG_FORMAT, Console.VERBOSE
    else:
        loglev, logfmt, console_level = logging.WARNING, _LOG_FORMAT, Console.NORMAL
    if getattr(opts, 'quiet', False):
        console_level = Console.QUIET

    logging.basicConfig(level=loglev, format=logfmt, datefmt='%Y-%m-%d %H:%M:%S',
                        stream=getattr(opts, 'logfile', None))
    return Console(level=console_level)
