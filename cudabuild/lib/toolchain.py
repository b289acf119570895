"""
Locate nvcc and recover its include and library directories from the
configuration it prints with ``nvcc -v``.
"""

__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# system level
import re
import sys
from pytools.prefork import call_capture_output, ExecError

# package level
from cudabuild import config
from cudabuild.errors import ToolExecError
from cudabuild.lib.search import PathSearch, os_family


INCLUDES_PREFIX = '#$ INCLUDES='
LIBRARIES_PREFIX = '#$ LIBRARIES='

VERBOSE_ARGS = ('-v', '.')

_QUOTED = re.compile(r'"([^"]*)"')


def nvcc_filenames(platform=None):
    if os_family(platform) == 'win32':
        return ('nvcc.exe',)
    return ('nvcc',)


def decode(data):
    if isinstance(data, str):
        return data
    encoding = getattr(sys.stdout, 'encoding', None) or 'utf-8'
    return data.decode(encoding, errors='replace')


def _extract(lines, prefix):
    paths = []
    for line in lines:
        if not line.startswith(prefix):
            continue
        for token in _QUOTED.findall(line[len(prefix):]):
            if token.startswith('-I') or token.startswith('-L'):
                token = token[2:]
            if token:
                paths.append(token)
    return paths


def parse_verbose(lines):
    """
    Extract the include and library directories from ``nvcc -v`` output.

    Only lines starting with ``#$ INCLUDES=`` or ``#$ LIBRARIES=`` are read.
    Each double quoted token on them is a directory, optionally prefixed by
    ``-I`` or ``-L``. Order is kept and duplicates are not removed.

    :arg lines: Sequence of lines or a single string.
    :return: tuple ``(includes, libraries)`` of lists of paths.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    lines = list(lines)
    return _extract(lines, INCLUDES_PREFIX), _extract(lines, LIBRARIES_PREFIX)


class Toolchain(object):
    """
    A located nvcc with the search paths it reported.

    :arg str path: Path of the nvcc executable.
    :arg includes: Include directories.
    :arg libraries: Library directories.
    """

    def __init__(self, path, includes=(), libraries=()):
        self._path = str(path)
        self._includes = tuple(includes)
        self._libraries = tuple(libraries)

    @classmethod
    def from_path(cls, path, runner=call_capture_output):
        """
        Run ``<path> -v .`` and parse its diagnostic output.

        nvcc exits non-zero here since ``.`` is not a source file, so a
        failing status is only an error when nothing could be parsed.
        """
        cmd = [str(path)] + list(VERBOSE_ARGS)
        try:
            result, stdout, stderr = runner(cmd, error_on_nonzero=False)
        except ExecError as e:
            raise ToolExecError(
                "couldn't run {}: {}".format(path, e), command=cmd)

        stdout = decode(stdout)
        stderr = decode(stderr)
        includes, libraries = parse_verbose(stderr)

        if result != 0 and not includes and not libraries:
            raise ToolExecError(
                "{} -v exited with status {} and reported no search "
                "paths".format(path, result),
                command=cmd, returncode=result, stdout=stdout, stderr=stderr)

        return cls(path, includes, libraries)

    def __repr__(self):
        return 'Toolchain({!r}, includes={!r}, libraries={!r})'.format(
            self._path, list(self._includes), list(self._libraries))

    @property
    def path(self):
        """Return path of nvcc."""
        return self._path

    @property
    def includes(self):
        """Return nvcc include directories."""
        return self._includes

    @property
    def libraries(self):
        """Return nvcc library directories."""
        return self._libraries

    @property
    def include_flags(self):
        return ['-I' + d for d in self._includes]


def find_nvcc(env=None, platform=None, globs=None):
    """
    Locate nvcc: ``NVCC_PATH``, then the directories of ``PATH``, then the
    backup globs of the OS family.
    """
    return PathSearch(
        nvcc_filenames(platform),
        env_var=config.NVCC_PATH,
        search_lists=(config.SEARCH_PATH,),
        globs=globs,
        env=env,
        platform=platform
    ).execute()


def find_toolchain(env=None, runner=call_capture_output, platform=None,
                   globs=None):
    return Toolchain.from_path(
        find_nvcc(env=env, platform=platform, globs=globs), runner=runner)
