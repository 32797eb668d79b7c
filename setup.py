# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause

import os
import sys

from setuptools import find_packages, setup

if not sys.version_info[:2] >= (3, 9):
    sys.exit(
        f"modman is only meant for Python 3.9 and up. "
        f"current version: {sys.version_info.major}.{sys.version_info.minor}"
    )


# When executing setup.py, we need to be able to import ourselves, this
# means that we need to add the src directory to the sys.path.
src_dir = here = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, src_dir)
import modman

long_description = """
modman installs, removes, enables and disables content packages ("mods") of a game
engine. Packages come from remote repository indexes or local zip/tar archives, and a
dependency validator keeps the set of enabled packages consistent: dependencies stay
enabled, conflicting packages never run together, and submods follow their parent.
"""

install_requires = [
    "boltons >=23.0.0",
    "frozendict >=2.4.2",
    "platformdirs >=3.10.0",
    "requests >=2.28.0",
    "ruamel.yaml >=0.11.14",
    "tqdm >=4",
]

setup(
    name=modman.__name__,
    version=modman.__version__,
    author=modman.__author__,
    license=modman.__license__,
    description=modman.__summary__,
    long_description=long_description,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    packages=find_packages(include=("modman", "modman.*")),
    entry_points={
        "console_scripts": [
            "modman=modman.cli.main:main",
        ],
    },
    install_requires=install_requires,
    extras_require={
        "test": [
            "pytest >=7",
            "pytest-mock",
        ],
    },
    python_requires=">=3.9",
    zip_safe=False,
)
