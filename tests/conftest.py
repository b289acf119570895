import io
import os
import stat
import pytest

import cudabuild


HOST = 'x86_64-unknown-linux-gnu'

NVCC_VERBOSE = r'''#$ _SPACE_= 
#$ _CUDART_=cudart
#$ _HERE_=/usr/local/cuda/bin
#$ _THERE_=/usr/local/cuda/bin
#$ _TARGET_SIZE_=
#$ _TARGET_DIR_=
#$ _TARGET_SIZE_=64
#$ TOP=/usr/local/cuda/bin/..
#$ NVVMIR_LIBRARY_DIR=/usr/local/cuda/bin/../nvvm/libdevice
#$ LD_LIBRARY_PATH=/usr/local/cuda/bin/../lib::/usr/local/cuda/lib64
#$ PATH=/usr/local/cuda/bin/../nvvm/bin:/usr/local/cuda/bin:/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin
#$ INCLUDES="-I/usr/local/cuda/bin/..//include"  
#$ LIBRARIES=  "-L/usr/local/cuda/bin/..//lib64/stubs" "-L/usr/local/cuda/bin/..//lib64"
#$ CUDAFE_FLAGS=
#$ PTXAS_FLAGS=
nvcc fatal   : Don't know what to do with '.'
'''

OPT_VERBOSE = '''#$ TOP=/opt/cuda/bin/..
#$ INCLUDES="-I/opt/cuda/include"
#$ LIBRARIES=  "-L/opt/cuda/lib64/stubs" "-L/opt/cuda/lib64"
nvcc fatal   : Don't know what to do with '.'
'''


def make_executable(path, mode=0o755):
    path = str(path)
    d = os.path.dirname(path)
    if not os.path.exists(d):
        os.makedirs(d)
    with open(path, 'w') as fh:
        fh.write('#!/bin/sh\n')
    os.chmod(path, mode)
    return path


def stage_of(cmd):
    if cmd[1:] == ['-v', '.']:
        return 'verbose'
    if '-dlink' in cmd:
        return 'dlink'
    if '-rcs' in cmd:
        return 'archive'
    if '-c' in cmd:
        return 'compile'
    return 'unknown'


class FakeRunner(object):
    """
    Stands in for pytools.prefork.call_capture_output. ``fail`` is called
    with each command line and returns True for commands that should exit
    with status 1.
    """
    def __init__(self, verbose=NVCC_VERBOSE, verbose_status=1, fail=None):
        self.verbose = verbose
        self.verbose_status = verbose_status
        self.fail = fail
        self.calls = []

    def __call__(self, cmd, error_on_nonzero=True):
        cmd = list(cmd)
        self.calls.append(cmd)
        if stage_of(cmd) == 'verbose':
            return self.verbose_status, b'', self.verbose.encode('utf-8')
        if self.fail is not None and self.fail(cmd):
            return 1, b'', b'nvcc error : failed'
        return 0, b'', b''

    def stages(self):
        return [stage_of(c) for c in self.calls]


@pytest.fixture
def nvcc(tmp_path):
    return make_executable(tmp_path / 'cuda' / 'bin' / 'nvcc')


@pytest.fixture
def environ(tmp_path, nvcc):
    return {
        'OUT_DIR': str(tmp_path / 'out'),
        'HOST': HOST,
        'TARGET': HOST,
        'NVCC_PATH': nvcc,
        'PATH': '',
    }


@pytest.fixture
def runner():
    return FakeRunner(verbose=OPT_VERBOSE)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def build(environ, runner, stream):
    return cudabuild.Build(environ=environ, runner=runner, stream=stream)
