#!/usr/bin/env python

from setuptools import setup

# Package metadata lives in setup.cfg
setup()
