"""
Compatibility shim.

All package configuration lives in pyproject.toml (PEP 621).
Modern installations should use: pip install -e .
"""

from setuptools import setup

setup()
