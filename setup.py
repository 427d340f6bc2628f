#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="domproxy",
    version=VERSION,
    packages=["domproxy", "domproxy.plugins"],
    python_requires=">=3.9",
    install_requires=["lxml", "pluggy"],
    extras_require={"test": ["pytest"]},
)
