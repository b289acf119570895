__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

##########################################################################
# Diagnostic IO helper functions.
##########################################################################

# system level
import sys


def _get_str(*args):
    return ' '.join(str(ix) for ix in args)


class Printer(object):
    """
    Print diagnostic text and link directives on a stream.

    :arg stream: File like object to print on, defaults to the current
    ``sys.stdout``.
    :arg bool enabled: If False nothing is printed.
    """
    def __init__(self, stream=None, enabled=True):
        self._stream = stream
        self.enabled = enabled

    @property
    def stream(self):
        if self._stream is None:
            return sys.stdout
        return self._stream

    def pprint(self, *args):
        if not self.enabled:
            return
        self.stream.write(_get_str(*args) + '\n')
        self.stream.flush()


class pfprint(object):
    """
    Diagnostic text written to a log file.

    :arg str filename: Log file path.
    :arg str mode: File mode, 'w' starts a fresh log.
    """
    def __init__(self, filename, mode='a'):
        self.filename = filename
        self._fh = open(filename, mode)

    def pwrite(self, *args):
        assert self._fh is not None, "No open file to write to."
        self._fh.write(_get_str(*args) + '\n')
        self._fh.flush()

    def close(self):
        """
        Close the open file.
        """
        if self._fh is not None:
            self._fh.close()
            self._fh = None
