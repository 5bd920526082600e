"""Shared fixtures for qwork tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def _no_operator_settings(monkeypatch):
    """Ensure tests never pick up the operator's QWORK_* settings."""
    for key in list(os.environ):
        if key.startswith("QWORK_"):
            monkeypatch.delenv(key)
