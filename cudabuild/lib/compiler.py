__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# package level
from cudabuild.errors import ArchitectureInvalid

DEFAULT_COMPILER = 'g++'
DEFAULT_ARCHIVER = 'ar'

# environment overrides
COMPILER_VAR = 'COMPILER'
ARCHIVER_VAR = 'AR'


class CrossTarget(object):
    """
    Container to define the host tools used for a cross compilation target.

    :arg str triple: Target triple, e.g. ``powerpc64le-unknown-linux-gnu``.
    :arg str compiler: Name(+path) of the host C++ compiler binary.
    :arg str archiver: Name(+path) of the archiver binary.
    """

    def __init__(self, triple, compiler, archiver):
        self._triple = triple
        self._compiler = compiler
        self._archiver = archiver

    def __str__(self):
        return ', '.join((self._triple, self._compiler, self._archiver))

    def __repr__(self):
        return 'CrossTarget({})'.format(str(self))

    def __eq__(self, other):
        return isinstance(other, CrossTarget) and \
            (self.triple, self.compiler, self.archiver) == \
            (other.triple, other.compiler, other.archiver)

    def __hash__(self):
        return hash((self._triple, self._compiler, self._archiver))

    @property
    def triple(self):
        """Return target triple."""
        return self._triple

    @property
    def compiler(self):
        """Return host compiler binary."""
        return self._compiler

    @property
    def archiver(self):
        """Return archiver binary."""
        return self._archiver


def _resolve(tool, default, host, target, explicit, env, env_var, targets):
    if explicit is not None:
        return str(explicit)

    if env is not None:
        override = env.get(env_var)
        if override is not None:
            return override

    if host == target:
        return default

    if targets is None:
        from cudabuild import config
        targets = config.TARGETS

    cross = targets.get(target)
    if cross is None:
        raise ArchitectureInvalid(
            "couldn't find {} for target {}".format(default, target),
            target=target
        )
    return getattr(cross, tool)


def resolve_compiler(host, target, explicit=None, env=None, targets=None):
    """
    Resolve the host C++ compiler nvcc is pointed at with ``-ccbin``.

    Order: ``explicit``, the ``COMPILER`` environment variable, ``g++`` if
    host and target agree, the cross compilation table.

    :arg str host: Host triple.
    :arg str target: Target triple.
    :arg explicit: Compiler set on the build, or None.
    :arg env: :class:`cudabuild.config.Environment` or None.
    :arg dict targets: triple -> CrossTarget, defaults to the packaged table.
    """
    return _resolve('compiler', DEFAULT_COMPILER, host, target, explicit, env,
                    COMPILER_VAR, targets)


def resolve_archiver(host, target, explicit=None, env=None, targets=None):
    """
    Resolve the archiver, same order as :func:`resolve_compiler` with the
    ``AR`` environment variable and ``ar`` as the native default.
    """
    return _resolve('archiver', DEFAULT_ARCHIVER, host, target, explicit, env,
                    ARCHIVER_VAR, targets)
