"""
Search for an executable in an override variable, delimited path lists and
OS specific glob locations.
"""

__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# system level
import os
import re
import sys
from glob import glob

# package level
from cudabuild.errors import ToolNotFound


# Backup search directory globs per OS family.
SEARCH_GLOBS = {
    'linux': ('/usr/local/cuda/bin', '/usr/local/cuda*/bin'),
    'freebsd': ('/usr/local/cuda/bin', '/usr/local/cuda*/bin'),
    'darwin': (),
    'win32': (),
}


def os_family(platform=None):
    """Return the SEARCH_GLOBS key for a ``sys.platform`` value."""
    if platform is None:
        platform = sys.platform
    for family in ('linux', 'freebsd', 'darwin', 'win32'):
        if platform.startswith(family):
            return family
    return platform


def _version_key(path):
    return tuple(int(x) for x in re.findall(r'\d+', path)), path


def expand_glob(pattern):
    """
    Expand ``pattern``, newest version first: numeric parts of the matched
    paths are compared as integers so ``cuda-12.4`` sorts before
    ``cuda-9.2``.
    """
    return sorted(glob(pattern), key=_version_key, reverse=True)


def _is_executable(path):
    return os.path.isfile(path) and os.access(path, os.X_OK)


class PathSearch(object):
    """
    Find the first of ``filenames`` on the searched locations.

    :arg filenames: Candidate file name or sequence of file names.
    :arg str env_var: Variable holding the full path of the file.
    :arg search_lists: Names of ``os.pathsep`` delimited directory list
    variables.
    :arg globs: Directory glob patterns, defaults to the SEARCH_GLOBS entry
    of ``platform``.
    :arg env: :class:`cudabuild.config.Environment` to read variables from.
    :arg str platform: ``sys.platform`` style name, defaults to the running
    platform.
    """
    def __init__(self, filenames, env_var=None, search_lists=(), globs=None,
                 env=None, platform=None):
        if isinstance(filenames, str):
            filenames = (filenames,)
        self.filenames = tuple(filenames)
        self.env_var = env_var
        self.search_lists = tuple(search_lists)
        if globs is None:
            globs = SEARCH_GLOBS.get(os_family(platform), ())
        self.globs = tuple(globs)
        self.env = env
        self.tried = []

    def _get(self, name):
        if self.env is None:
            return os.environ.get(name)
        return self.env.get(name)

    def _check(self, path):
        self.tried.append(path)
        return _is_executable(path)

    def _candidates(self, directory):
        for filename in self.filenames:
            yield os.path.join(directory, filename)

    def locations(self):
        """Yield every path to check, in search order."""
        if self.env_var is not None:
            path = self._get(self.env_var)
            if path:
                yield path

        for list_var in self.search_lists:
            value = self._get(list_var)
            if not value:
                continue
            for directory in value.split(os.pathsep):
                if directory:
                    for path in self._candidates(directory):
                        yield path

        for pattern in self.globs:
            for directory in expand_glob(pattern):
                for path in self._candidates(directory):
                    yield path

    def execute(self):
        """
        Return the first match, raise ToolNotFound if there is none.
        """
        self.tried = []
        for path in self.locations():
            if self._check(path):
                return path
        raise ToolNotFound(self.filenames, env_var=self.env_var,
                           tried=self.tried)


def find_file(filenames, env_var=None, search_lists=(), globs=None, env=None,
              platform=None):
    return PathSearch(filenames, env_var=env_var, search_lists=search_lists,
                      globs=globs, env=env, platform=platform).execute()
