# SPDX-License-Identifier: GPL-3.0-or-later
import sys
from argparse import ArgumentParser, Namespace
from unittest.mock import patch

import pytest

from capvcd_cleanup.exceptions import AuthenticationError, ConfigurationError
from capvcd_cleanup.services import VCDService
from capvcd_cleanup.tasks.cleanup import CapvcdCleanup
from capvcd_cleanup.vcd import VCDClient

from ..fake_vcd import ACCESS_TOKEN, API_TOKEN, ORG_NAME, VCD_URL, FakeVCD


def test_vcd_service_without_args() -> None:
    expected_err = "BUG: VCDService inheritor must provide 'args'"
    with pytest.raises(RuntimeError, match=expected_err):
        VCDService().vcd_auth_data


def test_vcd_service_auth_data() -> None:
    class ArgsService(VCDService):
        def __init__(self, args):
            super(ArgsService, self).__init__()
            self.args = args

    service = ArgsService(Namespace(vcd_url=VCD_URL, vcd_org=ORG_NAME, vcd_token=API_TOKEN))
    assert service.vcd_auth_data == {"url": VCD_URL, "org": ORG_NAME, "token": API_TOKEN}


def test_vcd_service_mixed_in_first() -> None:
    """The options are added whatever the position of the mix-in."""

    class ServiceFirst(VCDService):
        def __init__(self):
            self.parser = ArgumentParser()
            super(ServiceFirst, self).__init__()
            self.add_args()

    args = ServiceFirst().parser.parse_args(["-url", VCD_URL, "--vdc", "myvdc"])
    assert args.vcd_url == VCD_URL
    assert args.vcd_vdc == "myvdc"
    assert args.vcd_org == ""


def test_vcd_service(fake_vcd: FakeVCD) -> None:
    """Ensure the CapvcdCleanup has an authenticated VCDClient."""
    instance = CapvcdCleanup()
    arg = ["", "-url", VCD_URL, "-vorg", ORG_NAME, "-token", API_TOKEN]
    with patch.object(sys, "argv", arg):
        client = instance.vcd_client
        assert isinstance(client, VCDClient)
        assert client.org_name == ORG_NAME
        assert client.verbose is True
        assert client._access_token == ACCESS_TOKEN
        # Single VCDClient instance per task
        assert instance.vcd_client is client


def test_vcd_service_token_from_environ(
    fake_vcd: FakeVCD, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The API token defaults to the VCD_API_TOKEN environment variable."""
    monkeypatch.setenv("VCD_API_TOKEN", API_TOKEN)
    instance = CapvcdCleanup()
    arg = ["", "--url", VCD_URL, "--vorg", ORG_NAME]
    with patch.object(sys, "argv", arg):
        assert instance.args.vcd_token == API_TOKEN
        assert instance.vcd_client._access_token == ACCESS_TOKEN


def test_vcd_service_invalid_url() -> None:
    instance = CapvcdCleanup()
    arg = ["", "-url", "vcd.example.com", "-vorg", ORG_NAME, "-token", API_TOKEN]
    with patch.object(sys, "argv", arg):
        with pytest.raises(ConfigurationError, match="is not an absolute URL"):
            instance.vcd_client


def test_vcd_service_bad_token(fake_vcd: FakeVCD) -> None:
    instance = CapvcdCleanup()
    arg = ["", "-url", VCD_URL, "-vorg", ORG_NAME, "-token", "wrong"]
    with patch.object(sys, "argv", arg):
        with pytest.raises(AuthenticationError, match="unable to authenticate"):
            instance.vcd_client
        # A failed authentication is not cached
        assert instance._vcd_instance is None
