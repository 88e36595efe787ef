# SPDX-License-Identifier: GPL-3.0-or-later
import sys

import pytest
import requests_mock

from .fake_vcd import FakeVCD


@pytest.fixture(autouse=True)
def save_argv():
    """
    Save and restore sys.argv around each test.

    This is an autouse fixture, so tests can freely modify
    sys.argv without concern.
    """
    orig_argv = sys.argv[:]
    yield
    sys.argv[:] = orig_argv


@pytest.fixture(autouse=True)
def home_tmpdir(tmpdir, monkeypatch):
    """
    Point HOME environment variable underneath tmpdir for the duration of tests.

    This is an autouse fixture because certain used libraries are influenced by files under $HOME,
    and for tests which actually need it, we should explicitly set up anything needed there instead
    of inheriting the user's environment.
    """
    homedir = str(tmpdir.mkdir("home"))
    monkeypatch.setenv("HOME", homedir)


@pytest.fixture(autouse=True)
def clean_vcd_environ(monkeypatch):
    """Drop the VCD variables of the user's environment and never sleep between task polls."""
    monkeypatch.delenv("VCD_API_TOKEN", raising=False)
    monkeypatch.setattr("capvcd_cleanup.vcd.client.TASK_POLL_INTERVAL", 0.0)


@pytest.fixture(autouse=True)
def requests_mocker():
    """Mock all requests.

    This is an autouse fixture so that tests can't accidentally
    perform real requests without being noticed.
    """
    with requests_mock.Mocker() as m:
        yield m


@pytest.fixture
def fake_vcd(requests_mocker: requests_mock.Mocker) -> FakeVCD:
    """Return an empty in-memory VMware Cloud Director served through requests_mock."""
    return FakeVCD(requests_mocker)
