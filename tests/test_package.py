"""
Unit tests for the package surface.

Author: EGP Team
License: MIT
"""

import importlib

import pytest

import egp

MODULES = [
    "egp",
    "egp.blueprints",
    "egp.chromosome",
    "egp.component",
    "egp.config",
    "egp.errors",
    "egp.expression",
    "egp.logging_config",
    "egp.operators",
    "egp.rng",
    "egp.vectors",
]


# ============================================================================
# Package Tests
# ============================================================================

class TestPackage:
    """Test module headers and exports."""

    @pytest.mark.parametrize("name", MODULES)
    def test_module_header(self, name):
        doc = importlib.import_module(name).__doc__
        assert "Author: EGP Team" in doc
        assert "License: MIT" in doc

    @pytest.mark.parametrize("name", MODULES)
    def test_exports_resolve(self, name):
        module = importlib.import_module(name)
        for export in getattr(module, "__all__", []):
            assert hasattr(module, export), f"{name}.{export}"

    def test_version(self):
        assert egp.__version__ == "0.1.0"
