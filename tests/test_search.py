import os
import pytest

from cudabuild import ToolNotFound
from cudabuild.config import Environment
from cudabuild.lib.search import PathSearch, find_file, expand_glob, \
    os_family, SEARCH_GLOBS

from conftest import make_executable


def test_env_override_wins_over_globs(tmp_path):
    override = make_executable(tmp_path / 'override' / 'nvcc')
    make_executable(tmp_path / 'cuda-12.0' / 'bin' / 'nvcc')

    env = Environment({'NVCC_PATH': override})
    found = find_file('nvcc', env_var='NVCC_PATH', env=env,
                      globs=(str(tmp_path / 'cuda*' / 'bin'),))
    assert found == override


def test_env_override_missing_file_falls_through(tmp_path):
    backup = make_executable(tmp_path / 'cuda' / 'bin' / 'nvcc')

    env = Environment({'NVCC_PATH': str(tmp_path / 'does' / 'not' / 'exist')})
    search = PathSearch('nvcc', env_var='NVCC_PATH', env=env,
                        globs=(str(tmp_path / 'cuda' / 'bin'),))
    assert search.execute() == backup
    assert search.tried[0] == str(tmp_path / 'does' / 'not' / 'exist')


def test_search_list_before_globs(tmp_path):
    listed = make_executable(tmp_path / 'listed' / 'nvcc')
    make_executable(tmp_path / 'cuda' / 'bin' / 'nvcc')

    env = Environment({'EXTRA': os.pathsep.join(['', str(tmp_path / 'listed')])})
    found = find_file('nvcc', env_var='NVCC_PATH', search_lists=('EXTRA',),
                      env=env, globs=(str(tmp_path / 'cuda' / 'bin'),))
    assert found == listed


def test_candidate_order_within_directory(tmp_path):
    make_executable(tmp_path / 'bin' / 'nvcc')
    second = make_executable(tmp_path / 'bin' / 'nvcc-alt')
    env = Environment({'EXTRA': str(tmp_path / 'bin')})
    assert find_file(('nvcc-alt', 'nvcc'), search_lists=('EXTRA',),
                     env=env, globs=()) == second


def test_newest_version_first(tmp_path):
    for v in ('9.2', '11.8', '12.4'):
        make_executable(tmp_path / ('cuda-' + v) / 'bin' / 'nvcc')

    pattern = str(tmp_path / 'cuda*' / 'bin')
    assert expand_glob(pattern) == [
        str(tmp_path / 'cuda-12.4' / 'bin'),
        str(tmp_path / 'cuda-11.8' / 'bin'),
        str(tmp_path / 'cuda-9.2' / 'bin'),
    ]
    found = find_file('nvcc', env=Environment({}), globs=(pattern,))
    assert found == str(tmp_path / 'cuda-12.4' / 'bin' / 'nvcc')


def test_no_partial_match(tmp_path):
    make_executable(tmp_path / 'bin' / 'nvcc-wrapper')
    make_executable(tmp_path / 'bin' / 'xnvcc')
    os.makedirs(str(tmp_path / 'bin' / 'nvcc.d'))

    with pytest.raises(ToolNotFound):
        find_file('nvcc', env=Environment({}),
                  globs=(str(tmp_path / 'bin'),))


def test_not_executable_is_skipped(tmp_path):
    make_executable(tmp_path / 'a' / 'nvcc', mode=0o644)
    ok = make_executable(tmp_path / 'b' / 'nvcc')
    env = Environment({'EXTRA': os.pathsep.join([str(tmp_path / 'a'),
                                                 str(tmp_path / 'b')])})
    assert find_file('nvcc', search_lists=('EXTRA',), env=env,
                     globs=()) == ok


def test_exhaustion_lists_everything(tmp_path):
    env = Environment({'NVCC_PATH': str(tmp_path / 'gone'),
                       'EXTRA': str(tmp_path / 'one')})
    with pytest.raises(ToolNotFound) as e:
        find_file(('nvcc', 'nvcc.exe'), env_var='NVCC_PATH',
                  search_lists=('EXTRA',), env=env, globs=())

    err = e.value
    assert err.kind == 'ToolNotFound'
    assert err.filenames == ['nvcc', 'nvcc.exe']
    assert err.env_var == 'NVCC_PATH'
    assert err.tried == [
        str(tmp_path / 'gone'),
        os.path.join(str(tmp_path / 'one'), 'nvcc'),
        os.path.join(str(tmp_path / 'one'), 'nvcc.exe'),
    ]
    assert 'nvcc, nvcc.exe' in err.message
    assert 'NVCC_PATH' in err.message


def test_lookups_are_reported(tmp_path, stream):
    from cudabuild.pio import Printer
    env = Environment({'NVCC_PATH': '/nowhere'}, printer=Printer(stream))
    with pytest.raises(ToolNotFound):
        find_file('nvcc', env_var='NVCC_PATH', env=env, globs=())
    assert "NVCC_PATH = '/nowhere'" in stream.getvalue()


def test_os_family():
    assert os_family('linux') == 'linux'
    assert os_family('linux2') == 'linux'
    assert os_family('freebsd13') == 'freebsd'
    assert os_family('darwin') == 'darwin'
    assert os_family('win32') == 'win32'

    assert SEARCH_GLOBS['linux'] == ('/usr/local/cuda/bin',
                                     '/usr/local/cuda*/bin')
    assert SEARCH_GLOBS['freebsd'] == SEARCH_GLOBS['linux']
    assert SEARCH_GLOBS['darwin'] == ()
    assert SEARCH_GLOBS['win32'] == ()


def test_default_globs_follow_platform():
    assert PathSearch('nvcc', platform='darwin').globs == ()
    assert PathSearch('nvcc', platform='linux').globs == SEARCH_GLOBS['linux']
