"""
Pytest Configuration and Shared Fixtures
=========================================

This module configures pytest for the action search test suite.
It provides:
- Path setup for importing actionsearch
- Custom markers for test categorization
- Shared catalog fixtures available to all tests

Test Categories (markers):
- @pytest.mark.unit: Fast, isolated unit tests
- @pytest.mark.integration: Whole-engine query scenarios

Usage:
    # Run only unit tests
    pytest -m unit

    # Run the end-to-end scenarios
    pytest -m integration
"""

import os
import sys

import pytest


# =============================================================================
# PATH SETUP
# =============================================================================

# Ensure actionsearch is importable from any test directory
_repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _repo_root not in sys.path:
    sys.path.insert(0, _repo_root)


# =============================================================================
# PYTEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Fast, isolated unit tests (< 1s each)"
    )
    config.addinivalue_line(
        "markers", "integration: Whole-engine query scenarios"
    )


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def sample_catalog():
    """
    Session-scoped fixture providing the bundled sample catalog.

    Catalogs are immutable, so one instance is shared by every test.
    """
    from actionsearch import load_default_catalog
    return load_default_catalog()


@pytest.fixture
def call_catalog():
    """
    Minimal catalog: one app with a "call" action and one contact.

    Provides:
        phone app, action names=["call"], params=["contact"], caption "Call %"
        contact "Jane Doe"
    """
    from actionsearch import Catalog
    return Catalog.from_dicts(
        apps=[{
            "id": "phone",
            "actions": [{"names": ["call"], "params": ["contact"], "caption": "Call %"}],
        }],
        nouns={"contact": [{"serialized": "Jane Doe", "tel": "+1 555 0100"}]},
    )


@pytest.fixture
def recording_renderer():
    """Fresh RecordingRenderer."""
    from actionsearch import RecordingRenderer
    return RecordingRenderer()


# =============================================================================
# TEST COLLECTION HOOKS
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    Tests in tests/unit/ get @pytest.mark.unit, etc.
    """
    for item in items:
        test_path = str(item.fspath)

        if '/unit/' in test_path or '\\unit\\' in test_path:
            item.add_marker(pytest.mark.unit)
        elif '/integration/' in test_path or '\\integration\\' in test_path:
            item.add_marker(pytest.mark.integration)
