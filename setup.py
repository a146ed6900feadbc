#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""setup for boxcma package distribution.

To install from the source folder::

    pip install -e .[test]

To prepare a distribution::

    python setup.py check
    python setup.py sdist bdist_wheel > dist_call_output.txt ; less dist_call_output.txt
    twine check dist/*

"""
import re
from setuptools import setup

# read the version without importing the package, numpy may not be installed yet
with open('boxcma/__init__.py') as file:
    __version__ = re.search(r'^__version__ = "([^"]+)"', file.read(), re.M).group(1)

try:
    with open('README.txt') as file:
        long_description = file.read()
except IOError:  # file not found
    long_description = "box-constrained CMA-ES in Python, see `help(boxcma)`"

setup(name="boxcma",
      long_description=long_description,
      long_description_content_type='text/x-rst',
      version=__version__.split()[0],
      description="Box-constrained CMA-ES, Covariance Matrix Adaptation " +
                  "Evolution Strategy for non-linear numerical " +
                  "optimization in Python",
      license="BSD",
      classifiers = [
          "Intended Audience :: Science/Research",
          "Intended Audience :: Education",
          "Topic :: Scientific/Engineering",
          "Topic :: Scientific/Engineering :: Mathematics",
          "Topic :: Scientific/Engineering :: Artificial Intelligence",
          "Operating System :: OS Independent",
          "Programming Language :: Python :: 3",
          "Environment :: Console",
          "License :: OSI Approved :: BSD License",
      ],
      keywords=["optimization", "CMA-ES", "cmaes", "box constraints"],
      packages=["boxcma", "boxcma.utilities"],
      python_requires=">=3.6",
      install_requires=["numpy"],
      extras_require={
            "test": ["pytest"],
      },
      )
