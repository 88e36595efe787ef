# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import threading
from argparse import ArgumentParser
from typing import Dict, Optional

from ..arguments import from_environ
from ..vcd import VCDClient

log = logging.getLogger("capvcd.cleanup")


class VCDService:
    """
    Mix-in giving a task an authenticated VMware Cloud Director client.

    It adds the ``-url``, ``-vorg``, ``-vdc`` and ``-token`` options to the task
    parser and exposes :attr:`vcd_client`, authenticated on first access.
    The mix-in expects the task to provide ``parser`` and ``args``, as
    :class:`~capvcd_cleanup.task.CleanupTask` does.
    """

    def __init__(self, *args, **kwargs) -> None:
        """Instantiate a VCDService object."""
        self._vcd_instance: Optional[VCDClient] = None
        self._vcd_lock = threading.Lock()
        super(VCDService, self).__init__(*args, **kwargs)

    def add_args(self) -> None:
        """Add the VCD options after the ones of the other classes in the MRO."""
        super_add_args = getattr(super(VCDService, self), "add_args", lambda: None)
        super_add_args()
        self.add_vcd_args(self.parser)

    @staticmethod
    def add_vcd_args(parser: ArgumentParser) -> None:
        """
        Add the VMware Cloud Director connection options.

        Args:
            parser (ArgumentParser)
                The parser to include the additional arguments.
        """
        group = parser.add_argument_group("VMware Cloud Director")

        group.add_argument(
            "-url", "--url", dest="vcd_url", help="VMWare vCD URL", type=str, default=""
        )
        group.add_argument(
            "-vorg",
            "--vorg",
            dest="vcd_org",
            help="VMWare vCD organisation name",
            type=str,
            default="",
        )
        group.add_argument(
            "-vdc", "--vdc", dest="vcd_vdc", help="VMWare vCD virtual DC name", type=str, default=""
        )
        group.add_argument(
            "-token",
            "--token",
            dest="vcd_token",
            help="VMWare vCD API key (or set VCD_API_TOKEN environment variable)",
            type=from_environ("VCD_API_TOKEN"),
            default="",
        )

    @property
    def vcd_auth_data(self) -> Dict[str, str]:
        """Return the credentials given on the command line, as expected by VCDClient."""
        args = getattr(self, "args", None)
        if args is None:
            raise RuntimeError("BUG: VCDService inheritor must provide 'args'")
        return {"url": args.vcd_url, "org": args.vcd_org, "token": args.vcd_token}

    @property
    def vcd_client(self) -> VCDClient:
        """Return the authenticated VCD client, creating it on first access."""
        with self._vcd_lock:
            if not self._vcd_instance:
                self._vcd_instance = self._get_vcd_instance()
        return self._vcd_instance

    def _get_vcd_instance(self) -> VCDClient:
        auth_data = self.vcd_auth_data
        log.debug("Connecting to %s as org %s", auth_data["url"], auth_data["org"])
        return VCDClient.from_credentials(auth_data, verbose=True)
