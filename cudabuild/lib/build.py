__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"

# system level imports
import os
from pytools.prefork import call_capture_output, ExecError

# package level imports
from cudabuild import config, opt
from cudabuild.errors import BuildError, BuildIOError, EnvVarNotFound, \
    ToolExecError, abort
from cudabuild.pio import Printer, pfprint
from cudabuild.lib import directives
from cudabuild.lib.compiler import resolve_compiler, resolve_archiver
from cudabuild.lib.toolchain import find_toolchain, decode


PIC_FLAGS = ['-Xcompiler', '-fPIC']


class CompiledArtifact(object):
    """An object file and the source it was compiled from."""

    def __init__(self, obj, source):
        self.object = obj
        self.source = source

    def __repr__(self):
        return 'CompiledArtifact({!r}, {!r})'.format(self.object, self.source)


def object_path(out_dir, source):
    """
    Return the object file for ``source``: its path below ``out_dir`` with
    the anchor removed, ``..`` components replaced by ``__`` and ``.o``
    appended to the full file name, so ``k.cu`` gives ``k.cu.o`` and never
    meets ``k.cpp.o`` or the ``<name>_dlink.o`` device link object.
    """
    _, rest = os.path.splitdrive(os.path.normpath(source))
    parts = [p if p != '..' else '__' for p in rest.split(os.sep)
             if p not in ('', '.')]
    return os.path.join(out_dir, *parts) + '.o'


class BuildConfiguration(object):
    """
    A fully resolved build action. Attributes are fixed at construction.

    :arg str name: Library base name, ``mylib`` for ``libmylib.a``.
    :arg str out_dir: Directory objects and the library are written to.
    :arg str host: Host triple.
    :arg str target: Target triple.
    :arg Toolchain toolchain: Located nvcc.
    :arg str compiler: Host C++ compiler passed to ``-ccbin``.
    :arg str archiver: Archiver binary.
    :arg files: Source files in build order.
    :arg flags: Extra nvcc flags.
    :arg cpp_stdlib: C++ standard library to link, or None.
    :arg bool static: Static (``.a``) or shared (``.so``) output.
    :arg cuda_lib_dirs: CUDA library search paths to emit.
    """

    def __init__(self, name, out_dir, host, target, toolchain, compiler,
                 archiver, files=(), flags=(), cpp_stdlib=None, static=True,
                 cuda_lib_dirs=()):
        self._name = name
        self._out_dir = str(out_dir)
        self._host = host
        self._target = target
        self._toolchain = toolchain
        self._compiler = str(compiler)
        self._archiver = str(archiver)
        self._files = tuple(str(f) for f in files)
        self._flags = tuple(flags)
        self._cpp_stdlib = cpp_stdlib
        self._static = static
        self._cuda_lib_dirs = tuple(cuda_lib_dirs)

    @property
    def name(self):
        """Return library base name."""
        return self._name

    @property
    def out_dir(self):
        """Return output directory."""
        return self._out_dir

    @property
    def host(self):
        """Return host triple."""
        return self._host

    @property
    def target(self):
        """Return target triple."""
        return self._target

    @property
    def toolchain(self):
        """Return the located nvcc."""
        return self._toolchain

    @property
    def compiler(self):
        """Return host compiler."""
        return self._compiler

    @property
    def archiver(self):
        """Return archiver."""
        return self._archiver

    @property
    def files(self):
        """Return source files in build order."""
        return self._files

    @property
    def flags(self):
        """Return extra nvcc flags."""
        return self._flags

    @property
    def cpp_stdlib(self):
        """Return C++ standard library to link, or None."""
        return self._cpp_stdlib

    @property
    def static(self):
        """Return True for static output."""
        return self._static

    @property
    def cuda_lib_dirs(self):
        """Return CUDA library search paths."""
        return self._cuda_lib_dirs

    @property
    def lib_path(self):
        ext = '.a' if self._static else '.so'
        return os.path.join(self._out_dir, 'lib' + self._name + ext)

    @property
    def dlink_path(self):
        return os.path.join(self._out_dir, self._name + '_dlink.o')

    @property
    def log_path(self):
        return os.path.join(self._out_dir, 'lib' + self._name + '.log')

    def object_path(self, source):
        return object_path(self._out_dir, source)


class BuildPipeline(object):
    """
    Compile, device link and archive the sources of one BuildConfiguration.
    Stages run strictly in order and the first failure stops the build.

    :arg BuildConfiguration cfg: What to build.
    :arg runner: ``call_capture_output`` compatible callable.
    :arg Printer printer: Where diagnostics and directives are printed.
    :arg int verbose: Print tool output of successful invocations if > 0.
    :arg bool keep_log: Write ``lib<name>.log`` in the output directory.
    :arg int timer_level: Stage timers run if > 0.
    """

    def __init__(self, cfg, runner=call_capture_output, printer=None,
                 verbose=1, keep_log=True, timer_level=1):
        self.cfg = cfg
        self._runner = runner
        self.printer = printer if printer is not None else Printer()
        self._verbose = verbose
        self._keep_log = keep_log
        self._timer_level = timer_level
        self._log = None

    def _include_flags(self):
        flags = []
        for inc in self.cfg.toolchain.include_flags:
            flags += ['-Xcompiler', inc]
        return flags

    def _nvcc_base(self):
        return [self.cfg.toolchain.path] + list(self.cfg.flags) + \
            ['-ccbin', self.cfg.compiler]

    def compile_command(self, obj, src):
        return self._nvcc_base() + ['-rdc=true', '-c'] + PIC_FLAGS + \
            self._include_flags() + ['-o', obj, src]

    def dlink_command(self, output, objects):
        return self._nvcc_base() + ['-dlink'] + PIC_FLAGS + \
            self._include_flags() + ['-o', output] + list(objects)

    def archive_command(self, output, objects):
        return [self.cfg.archiver, '-rcs', output] + list(objects)

    def _write(self, *args):
        if self._log is not None:
            self._log.pwrite(*args)

    def _call(self, stage, cmd, message):
        self._write('# ' + stage + ' command:')
        self._write(' '.join(cmd))

        try:
            result, stdout, stderr = self._runner(cmd, error_on_nonzero=False)
        except ExecError as e:
            self._write(str(e))
            raise ToolExecError('{}: {}'.format(message, e), command=cmd)

        stdout = decode(stdout)
        stderr = decode(stderr)
        self._write('status:', result)
        self._write(stdout)
        self._write(stderr)

        if result != 0:
            self.printer.pprint("\n---- COMPILER OUTPUT START ----")
            self.printer.pprint(' '.join(cmd))
            self.printer.pprint(stdout)
            self.printer.pprint(stderr)
            self.printer.pprint("----- COMPILER OUTPUT END -----")
            raise ToolExecError(message, command=cmd, returncode=result,
                                stdout=stdout, stderr=stderr)

        if self._verbose > 0:
            self.printer.pprint(stage + ':')
            self.printer.pprint('status:', result)
            self.printer.pprint('stdout:', stdout)
            self.printer.pprint('stderr:', stderr)

    def compile_object(self, src):
        obj = self.cfg.object_path(src)
        try:
            os.makedirs(os.path.dirname(obj), exist_ok=True)
        except OSError as e:
            raise BuildIOError.from_os_error(e)
        self._call('compile', self.compile_command(obj, src),
                   "couldn't compile object {}".format(src))
        return CompiledArtifact(obj, src)

    def device_link(self, objects):
        output = self.cfg.dlink_path
        self._call('dlink', self.dlink_command(output, objects),
                   "couldn't device link compiled objects")
        return output

    def archive(self, objects):
        output = self.cfg.lib_path
        self._call('archive', self.archive_command(output, objects),
                   "couldn't archive device-linked objects")
        return output

    def _timed(self, stage, func, *args):
        timer = opt.Timer(self._timer_level, 0, start=True)
        try:
            return func(*args)
        finally:
            timer.pause()
            opt.record('Build:' + stage, timer)

    def _compile_all(self):
        return [self.compile_object(src) for src in self.cfg.files]

    def run(self):
        """
        Build the library and emit its link directives.

        :return: list of LinkDirective in emission order.
        """
        cfg = self.cfg
        try:
            os.makedirs(cfg.out_dir, exist_ok=True)
            if self._keep_log:
                self._log = pfprint(cfg.log_path, mode='w')
        except OSError as e:
            raise BuildIOError.from_os_error(e)

        try:
            artifacts = self._timed('compile', self._compile_all)
            objects = [a.object for a in artifacts]
            dlink = self._timed('dlink', self.device_link, objects)
            self._timed('archive', self.archive, [dlink] + objects)
        finally:
            if self._log is not None:
                self._log.close()
                self._log = None

        link = directives.library_directives(
            cfg.out_dir, cfg.name, cfg.cuda_lib_dirs, cfg.files,
            cpp_stdlib=cfg.cpp_stdlib
        )
        directives.emit(link, self.printer)
        return link


class Build(object):
    """
    Collect the configuration of a CUDA library build. Setters return the
    builder so calls can be chained::

        Build().file('src/kernel.cu').flag('-O3').compile('kernel')

    :arg environ: Mapping environment variables are read from, defaults to
    ``os.environ``.
    :arg runner: ``call_capture_output`` compatible callable used for every
    external tool.
    :arg stream: Stream diagnostics and directives are printed on, defaults
    to stdout.
    :arg dict targets: Cross compilation table, defaults to the packaged
    table plus ``CUDABUILD_EXTRA_TARGETS``.
    """

    def __init__(self, environ=None, runner=call_capture_output, stream=None,
                 targets=None):
        self._environ = environ
        self._runner = runner
        self._stream = stream
        self._targets = targets

        self._cargo_metadata = True
        self._compiler = None
        self._archiver = None
        self._files = []
        self._flags = []
        self._host = None
        self._target = None
        self._out_dir = None
        self._link_cpp_stdlib = None
        self._static = True

    def file(self, p):
        self._files.append(str(p))
        return self

    def files(self, paths):
        for p in paths:
            self.file(p)
        return self

    def flag(self, f):
        self._flags.append(str(f))
        return self

    def flags(self, fs):
        for f in fs:
            self.flag(f)
        return self

    def out_dir(self, p):
        self._out_dir = str(p)
        return self

    def host(self, triple):
        self._host = triple
        return self

    def target(self, triple):
        self._target = triple
        return self

    def compiler(self, p):
        self._compiler = str(p)
        return self

    def archiver(self, p):
        self._archiver = str(p)
        return self

    def link_cpp_stdlib(self):
        """Link the platform default C++ standard library."""
        self._link_cpp_stdlib = True
        return self

    def set_cpp_stdlib(self, name):
        """Link the C++ standard library ``name``."""
        self._link_cpp_stdlib = name
        return self

    def static(self, flag=True):
        self._static = flag
        return self

    def shared(self):
        return self.static(False)

    def cargo_metadata(self, flag=True):
        """If False nothing is printed, directives are only returned."""
        self._cargo_metadata = flag
        return self

    def _printer(self):
        return Printer(self._stream, enabled=self._cargo_metadata)

    def _get_out_dir(self, env):
        if self._out_dir is not None:
            return self._out_dir
        return env.require(config.OUT_DIR)

    def _get_targets(self, env):
        if self._targets is not None:
            return self._targets
        extra = env.get(config.EXTRA_TARGETS)
        if extra:
            return config.load_targets(extra)
        return config.TARGETS

    def _get_cuda_target(self, env, host, target):
        cuda_target = env.get(config.CUDA_TARGET)
        if cuda_target is None:
            raise EnvVarNotFound(
                'cross compiling from {} to {} requires {} to point at the '
                'target CUDA installation'.format(host, target,
                                                  config.CUDA_TARGET),
                name=config.CUDA_TARGET)
        return cuda_target

    def _get_cpp_stdlib(self, target):
        if self._link_cpp_stdlib is None:
            return None
        if self._link_cpp_stdlib is True:
            return directives.cpp_stdlib_default(target)
        return self._link_cpp_stdlib

    def configure(self, output, env):
        """
        Resolve every setting once and return the BuildConfiguration for
        library ``output``. Nothing is compiled.
        """
        out_dir = self._get_out_dir(env)
        host = self._host if self._host is not None else \
            env.require(config.HOST)
        target = self._target if self._target is not None else \
            env.require(config.TARGET)

        targets = self._get_targets(env)
        compiler = resolve_compiler(host, target, explicit=self._compiler,
                                    env=env, targets=targets)
        archiver = resolve_archiver(host, target, explicit=self._archiver,
                                    env=env, targets=targets)
        cuda_target = None
        if host != target:
            cuda_target = self._get_cuda_target(env, host, target)

        # nvcc only runs once every setting above is known to be valid
        toolchain = find_toolchain(env=env, runner=self._runner)
        if cuda_target is None:
            cuda_lib_dirs = toolchain.libraries
        else:
            cuda_lib_dirs = [os.path.join(cuda_target, 'lib64')]

        return BuildConfiguration(
            output, out_dir, host, target, toolchain, compiler, archiver,
            files=self._files, flags=self._flags,
            cpp_stdlib=self._get_cpp_stdlib(target), static=self._static,
            cuda_lib_dirs=cuda_lib_dirs
        )

    def try_compile(self, output):
        """
        Build ``lib<output>`` and print its link directives.

        :return: list of LinkDirective.
        :raises BuildError: On the first failure.
        """
        printer = self._printer()
        env = config.Environment(self._environ, printer=printer)
        verbose = env.option('verbose-level')
        keep_log = env.option('keep-log')
        timer_level = env.option('build-timer-level')
        cfg = self.configure(output, env)
        pipeline = BuildPipeline(
            cfg,
            runner=self._runner,
            printer=printer,
            verbose=verbose,
            keep_log=keep_log,
            timer_level=timer_level
        )
        return pipeline.run()

    def compile(self, output):
        """As try_compile but terminates the process on failure."""
        try:
            return self.try_compile(output)
        except BuildError as e:
            abort(e)
