#!/usr/bin/env python

from setuptools import setup

setup(name = 'MarginSampler',
      version = '0.1.0',
      description = 'Random binary matrices with fixed or interval margins.',
      py_modules = ['BinaryMatrix', 'Chains', 'Exact', 'Generator',
                    'Margins', 'Sampling', 'Utility'],
      python_requires = '>=3.8',
      install_requires = ['numpy>=1.17', 'scipy>=1.8'],
      extras_require = { 'test': ['pytest'],
                         'experiments': ['matplotlib'] },
      )
