"""
Error kinds raised while locating the CUDA toolchain and building libraries.

Every exception derives from :class:`BuildError` and carries a ``kind`` from
:data:`ErrorKind` and a human readable ``message``.
"""

__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# system level
import sys
import traceback


def enum(**enums):
    return type('Enum', (), enums)


ErrorKind = enum(
    IOError='IOError',
    ArchitectureInvalid='ArchitectureInvalid',
    EnvVarNotFound='EnvVarNotFound',
    ToolExecError='ToolExecError',
    ToolNotFound='ToolNotFound'
)


class BuildError(RuntimeError):
    """
    Base class of all cudabuild errors.

    :arg str message: Explanation of the error.
    """
    kind = None

    def __init__(self, message):
        super(BuildError, self).__init__(message)
        self.message = message

    def __str__(self):
        return '{}: {}'.format(self.kind, self.message)


class BuildIOError(BuildError):
    """Wraps a filesystem or process I/O failure."""
    kind = ErrorKind.IOError

    @classmethod
    def from_os_error(cls, e):
        err = cls(str(e))
        err.__cause__ = e
        return err


class ArchitectureInvalid(BuildError):
    """Host or target triple not recognised for tool resolution."""
    kind = ErrorKind.ArchitectureInvalid

    def __init__(self, message, target=None):
        super(ArchitectureInvalid, self).__init__(message)
        self.target = target


class EnvVarNotFound(BuildError):
    """A required environment variable is not defined."""
    kind = ErrorKind.EnvVarNotFound

    def __init__(self, message, name=None):
        super(EnvVarNotFound, self).__init__(message)
        self.name = name


class ToolExecError(BuildError):
    """
    An external tool was invoked but failed or produced unusable output.

    :arg str message: Explanation of the error.
    :arg list command: Command line that was run.
    :arg int returncode: Exit status, None if the process never started.
    :arg str stdout: Captured standard output.
    :arg str stderr: Captured standard error.
    """
    kind = ErrorKind.ToolExecError

    def __init__(self, message, command=None, returncode=None, stdout='',
                 stderr=''):
        super(ToolExecError, self).__init__(message)
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ToolNotFound(BuildError):
    """
    An executable could not be found on any searched location.

    :arg list filenames: Candidate file names searched for.
    :arg str env_var: Override environment variable consulted.
    :arg list tried: Every concrete path that was checked.
    """
    kind = ErrorKind.ToolNotFound

    def __init__(self, filenames, env_var=None, tried=()):
        self.filenames = list(filenames)
        self.env_var = env_var
        self.tried = list(tried)
        message = 'could not find {} (searched environment variable {}, ' \
                  'tried: {})'.format(
                      ', '.join(self.filenames), env_var,
                      ', '.join(self.tried) if self.tried else 'nothing')
        super(ToolNotFound, self).__init__(message)


def abort(err='-', err_code=1):
    """
    Print the error in a banner and terminate the process.

    :arg err: Error or message to report.
    :arg int err_code: Process exit status.
    """
    print(80*"=")
    print("cudabuild: Internal error occurred ---")
    print(err)
    print(80*"=")
    traceback.print_stack()
    print(80*"=")
    sys.stdout.flush()
    sys.stderr.flush()
    sys.exit(err_code)
