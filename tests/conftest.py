"""
Shared pytest fixtures for typedconf tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import unittest.mock as _mock

import pytest as _pytest

import typedconf.config as config
import typedconf.settings as settings

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "TYPEDCONF_JSON_COMMENTS",
    "TYPEDCONF_ENCODING",
]


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with typedconf keys removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {k: v for k, v in _os.environ.items() if k not in ENV_KEYS_TO_CLEAR}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                s = settings.Settings()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def clean_settings(isolated_env) -> settings.Settings:
    """Settings instance with default values, unaffected by the environment."""
    with isolated_env:
        return settings.Settings()


@_pytest.fixture
def cfg(clean_settings: settings.Settings) -> config.Config:
    """An empty Config with default settings."""
    return config.Config(settings=clean_settings)
