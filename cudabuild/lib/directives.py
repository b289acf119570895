"""
Link directives handed back to the host build system, one per line in the
Cargo build script protocol.
"""

__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

from cudabuild.errors import enum

PREFIX = 'cargo:'

DirectiveKind = enum(
    search='rustc-link-search=native=',
    static='rustc-link-lib=static=',
    dylib='rustc-link-lib=',
    rerun='rerun-if-changed='
)

CUDA_LIBS = ('cudart', 'cudadevrt')


def cpp_stdlib_default(target):
    if 'apple' in target or 'darwin' in target:
        return 'c++'
    return 'stdc++'


class LinkDirective(object):
    """
    A single directive.

    :arg str kind: One of the DirectiveKind values.
    :arg str value: Path or library name.
    """

    def __init__(self, kind, value):
        self.kind = kind
        self.value = str(value)

    def __str__(self):
        return PREFIX + self.kind + self.value

    def __repr__(self):
        return 'LinkDirective({!r})'.format(str(self))

    def __eq__(self, other):
        return isinstance(other, LinkDirective) and str(self) == str(other)

    def __hash__(self):
        return hash(str(self))


def search(path):
    return LinkDirective(DirectiveKind.search, path)


def static_lib(name):
    return LinkDirective(DirectiveKind.static, name)


def dylib(name):
    return LinkDirective(DirectiveKind.dylib, name)


def rerun_if_changed(path):
    return LinkDirective(DirectiveKind.rerun, path)


def library_directives(out_dir, name, cuda_lib_dirs, sources,
                       cpp_stdlib=None):
    """
    Directives for a built library, in the order the host build system
    expects them:

    1. search path for ``out_dir``;
    2. the library itself, always linked as ``static=<name>``;
    3. a search path per CUDA library directory;
    4. ``cudart`` and ``cudadevrt``;
    5. ``rerun-if-changed`` per source;
    6. the C++ standard library, if ``cpp_stdlib`` is given.
    """
    directives = [search(out_dir)]
    directives.append(static_lib(name))
    directives.extend(search(p) for p in cuda_lib_dirs)
    directives.extend(dylib(lib) for lib in CUDA_LIBS)
    directives.extend(rerun_if_changed(s) for s in sources)
    if cpp_stdlib is not None:
        directives.append(dylib(cpp_stdlib))
    return directives


def emit(directives, printer):
    for d in directives:
        printer.pprint(str(d))
