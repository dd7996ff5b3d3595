r"""Unit tests for package initialization and metadata."""

from __future__ import annotations

import inspect

import aresfetch


def test_package_version_is_string() -> None:
    """Test that __version__ is a string."""
    assert isinstance(aresfetch.__version__, str)


def test_package_version_format() -> None:
    """Test that __version__ follows semantic versioning."""
    assert "." in aresfetch.__version__


def test_all_exports_defined() -> None:
    """Test that all items in __all__ are defined in the module."""
    for name in aresfetch.__all__:
        assert hasattr(aresfetch, name), f"{name} is in __all__ but not defined in module"


def test_all_exports_unique() -> None:
    assert len(set(aresfetch.__all__)) == len(aresfetch.__all__)


def test_module_helpers_are_coroutine_functions() -> None:
    for name in ("fetch", "request", "get", "delete", "post", "put", "patch"):
        assert inspect.iscoroutinefunction(getattr(aresfetch, name)), name
