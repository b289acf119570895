"""
Configuration handling for package
"""
__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# system level imports
import os
import configparser as ConfigParser
from glob import glob

# package level imports
from cudabuild.errors import EnvVarNotFound, BuildIOError
from cudabuild.lib import compiler


# environment variable names
OUT_DIR = 'OUT_DIR'
TARGET = 'TARGET'
HOST = 'HOST'
COMPILER = compiler.COMPILER_VAR
ARCHIVER = compiler.ARCHIVER_VAR
NVCC_PATH = 'NVCC_PATH'
SEARCH_PATH = 'PATH'
CUDA_TARGET = 'CUDA_TARGET'
EXTRA_TARGETS = 'CUDABUILD_EXTRA_TARGETS'


def str_to_bool(s="0"):
    return bool(int(s))


MAIN_CFG = dict()

# defaults and type defs for main options, overridden by CUDABUILD_<KEY>
MAIN_CFG['verbose-level'] = (int, 1)
MAIN_CFG['build-timer-level'] = (int, 1)
MAIN_CFG['keep-log'] = (str_to_bool, True)

TARGETS_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)),
                           'targets')

TARGET_KEYS = (
    'triple',
    'compiler',
    'archiver'
)


class Environment(object):
    """
    Read only view of the variables a build is configured from. Every lookup
    is reported on the printer as ``NAME = value``.

    :arg environ: Mapping to read from, defaults to ``os.environ``.
    :arg printer: :class:`cudabuild.pio.Printer` or None.
    """
    def __init__(self, environ=None, printer=None):
        if environ is None:
            environ = os.environ
        self._environ = environ
        self.printer = printer

    def get(self, name):
        """Return the value of ``name`` or None if it is not set."""
        value = self._environ.get(name)
        if self.printer is not None:
            self.printer.pprint('{} = {!r}'.format(name, value))
        return value

    def require(self, name):
        """Return the value of ``name``, raise EnvVarNotFound if unset."""
        value = self.get(name)
        if value is None:
            raise EnvVarNotFound(
                'Environment variable {} not defined.'.format(name), name=name)
        return value

    def option(self, key):
        """
        Return the value of main option ``key`` read from
        ``CUDABUILD_<KEY>`` falling back to the default in MAIN_CFG.
        """
        t, default = MAIN_CFG[key]
        name = 'CUDABUILD_' + key.upper().replace('-', '_')
        value = self._environ.get(name)
        if value is None:
            return default
        try:
            return t(value)
        except ValueError:
            raise EnvVarNotFound(
                'Environment variable {} has invalid value {!r}, expected '
                'an integer.'.format(name, value), name=name)


def _read_target(filename):
    cc_parser = ConfigParser.ConfigParser()
    try:
        with open(filename) as fh:
            cc_parser.read_string(fh.read(), source=filename)
        args = [cc_parser.get('target', key) for key in TARGET_KEYS]
    except (OSError, ConfigParser.Error) as e:
        raise BuildIOError('bad target config {}: {}'.format(filename, e))
    return compiler.CrossTarget(*args)


def load_targets(extra_dir=None):
    """
    Parse the packaged cross compilation targets and, if given, every
    ``*.cfg`` file in ``extra_dir``. Later files override earlier ones with
    the same triple.

    :return: dict mapping triple to :class:`cudabuild.lib.compiler.CrossTarget`.
    """
    target_cfgs = sorted(glob(os.path.join(TARGETS_DIR, '*.cfg')))

    if extra_dir is not None:
        target_cfgs += sorted(glob(os.path.join(os.path.abspath(extra_dir),
                                                '*.cfg')))

    targets = dict()
    for cfg in target_cfgs:
        t = _read_target(cfg)
        targets[t.triple] = t
    return targets


TARGETS = load_targets()
