# pylint: skip-file
"""azvm.

Walks a Windows and a Linux virtual machine through a full Azure lifecycle:
resource group, network, managed disks, launch, tag, attach, list, delete and
teardown.
"""
import os
import re
import runpy

import setuptools

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
PACKAGE_DIR = os.path.join(ROOT_DIR, 'azvm')

# dependencies.py must not import azvm (its requirements may be missing at
# build time), so it is executed as a script and read back as a dict.
dependencies = runpy.run_path(
    os.path.join(PACKAGE_DIR, 'setup_files', 'dependencies.py'))


def read_version() -> str:
    with open(os.path.join(PACKAGE_DIR, '__init__.py'), encoding='utf-8') as f:
        match = re.search(r'^__version__ = [\'"]([^\'"]+)[\'"]', f.read(),
                          re.M)
    if match is None:
        raise RuntimeError('azvm/__init__.py defines no __version__.')
    return match.group(1)


def read_long_description() -> str:
    readme = os.path.join(ROOT_DIR, 'README.md')
    if not os.path.exists(readme):
        return __doc__
    with open(readme, encoding='utf-8') as f:
        return f.read()


setuptools.setup(
    name='azvm',
    version=read_version(),
    description='Provision, update and tear down Azure virtual machines.',
    long_description=read_long_description(),
    long_description_content_type='text/markdown',
    license='Apache 2.0',
    packages=setuptools.find_packages(include=['azvm', 'azvm.*']),
    python_requires='>=3.8',
    install_requires=dependencies['install_requires'],
    extras_require=dependencies['extras_require'],
    entry_points={'console_scripts': ['azvm = azvm.cli:cli']},
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: OS Independent',
        'Topic :: System :: Systems Administration',
    ],
)
