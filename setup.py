from setuptools import setup

long_description = """cudabuild compiles CUDA sources into a static or shared library from a build script. It locates nvcc, recovers the toolchain include and library directories from its verbose output, compiles, device links and archives the sources and prints the link directives the host build system needs to consume the library.
"""

install_requires = []
with open('requirements.txt') as fh:
    for l in fh:
        l = l.strip()
        if len(l) > 0:
            install_requires.append(l)

setup(
   name='cudabuild',
   version='1.0',
   description='Build CUDA static libraries from build scripts',
   license="GPL3",
   long_description=long_description,
   author='William R Saunders',
   author_email='W.R.Saunders@bath.ac.uk',
   packages=['cudabuild', 'cudabuild.lib'],
   package_data={'cudabuild': ['targets/*.cfg']},
   install_requires=install_requires,
   extras_require={'test': ['pytest']},
   scripts=[]
)
