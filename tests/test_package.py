"""Tests for package structure and imports."""

import pytest


@pytest.mark.unit
def test_package_imports():
    """Package imports without errors."""
    import dcon

    assert dcon is not None


@pytest.mark.unit
def test_version_format():
    """Version follows semver format."""
    from dcon import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    for part in parts:
        assert part.isdigit()


@pytest.mark.unit
def test_version_value():
    from dcon import __version__

    assert __version__ == "0.1.0"


@pytest.mark.unit
def test_formatters_registered():
    from dcon.formatters import registry

    assert registry.available == ["csv", "json", "table"]
