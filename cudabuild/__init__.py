__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

__all__ = [ 'config',
            'errors',
            'opt',
            'pio',
            'lib',
            'Build',
            'BuildError',
            'Toolchain',
            'abort']

from . import errors
from . import lib
from . import config
from . import opt
from . import pio

from .errors import BuildError, BuildIOError, ArchitectureInvalid, \
    EnvVarNotFound, ToolExecError, ToolNotFound, ErrorKind, abort
from .lib.toolchain import Toolchain, find_nvcc, find_toolchain, parse_verbose
from .lib.build import Build, BuildConfiguration, BuildPipeline
