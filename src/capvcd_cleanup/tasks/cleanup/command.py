# SPDX-License-Identifier: GPL-3.0-or-later
import logging
from typing import List, Optional

from attrs import field, frozen
from attrs.validators import instance_of

from ...arguments import SplitAndExtend
from ...deleters import delete_capvcd_rde_by_name, delete_vapp_by_name
from ...exceptions import CleanupError
from ...services import VCDService
from ...state import State
from ...task import RUN_RESULT, CleanupTask
from ...vcd import VCDClient, VCDError

log = logging.getLogger("capvcd.cleanup")

step = CleanupTask.step

# Errors expected from the workflow; anything else is a bug and gets a traceback.
CLEANUP_FAILURES = (CleanupError, VCDError)


@frozen
class CleanupItem:
    """The outcome of the cleanup for a single resource."""

    kind: str = field(validator=instance_of(str))
    """The resource kind: ``rde`` or ``vapp``."""

    name: str = field(validator=instance_of(str))
    """The resource name."""

    state: State = field(converter=State)
    """What happened to the resource."""


class CapvcdCleanup(CleanupTask, VCDService):
    """Delete the leftovers of a CAPVCD (Tanzu) cluster from VMware Cloud Director.

    The cluster RDE (vmware/capvcdCluster/1.3.0) is deleted first, then the vApp
    with the same name. Resources which are already gone are ignored, so the
    command can be re-run safely after a partial failure.
    """

    def add_args(self) -> None:
        """Include the required CLI arguments for CapvcdCleanup."""
        super(CapvcdCleanup, self).add_args()

        self.parser.add_argument(
            "-name", "--name", help="Tanzu cluster name", type=str, default=""
        )

        self.parser.add_argument(
            "--rde-name",
            help="Name of the CAPVCD RDE to delete, when it differs from --name",
            type=str,
        )

        self.parser.add_argument(
            "--vapp-name",
            help="Name of the vApp to delete, when it differs from --name",
            type=str,
        )

        self.parser.add_argument(
            "--dry-run",
            help="Look up and check the resources but skip destructive actions on vCD",
            action="store_true",
        )

        self.parser.add_argument(
            "--skip",
            help="Steps to skip, separated by comma (delete-capvcd-rde, delete-vapp)",
            action=SplitAndExtend,
            split_on=",",
            default=[],
        )

    @property
    def rde_name(self) -> str:
        """Return the name of the CAPVCD RDE to delete."""
        return self.args.rde_name or self.args.name

    @property
    def vapp_name(self) -> str:
        """Return the name of the vApp to delete."""
        return self.args.vapp_name or self.args.name

    @step("Delete CAPVCD RDE")
    def delete_rde(self, client: VCDClient) -> State:
        """Delete the cluster RDE."""
        return delete_capvcd_rde_by_name(client, self.rde_name, dry_run=self.args.dry_run)

    @step("Delete vApp")
    def delete_vapp(self, client: VCDClient) -> State:
        """Delete the cluster vApp."""
        return delete_vapp_by_name(
            client,
            self.args.vcd_org,
            self.args.vcd_vdc,
            self.vapp_name,
            dry_run=self.args.dry_run,
        )

    def _connect(self) -> Optional[VCDClient]:
        try:
            return self.vcd_client
        except CLEANUP_FAILURES as exc:
            log.error("Error initializing vCloud Director client: %s", exc)
            return None

    def run(self) -> RUN_RESULT:
        """Execute the cleanup workflow.

        The workflow stops at the first failing step; nothing is rolled back.
        """
        client = self._connect()
        if client is None:
            return RUN_RESULT(False, False, [])

        stages = (
            ("rde", self.rde_name, self.delete_rde, "Error deleting CAPVCD RDE"),
            ("vapp", self.vapp_name, self.delete_vapp, "Error deleting vApp"),
        )
        result: List[CleanupItem] = []
        for kind, name, delete_fn, error_prefix in stages:
            try:
                state = delete_fn(client)
            except CLEANUP_FAILURES as exc:
                log.error("%s: %s", error_prefix, exc)
                log.error("Cleanup failed")
                return RUN_RESULT(False, self._skipped(result), result)
            result.append(CleanupItem(kind=kind, name=name, state=state or State.SKIPPED))

        log.info("Cleanup completed")
        return RUN_RESULT(True, self._skipped(result), result)

    @staticmethod
    def _skipped(result: List[CleanupItem]) -> bool:
        return any(item.state == State.SKIPPED for item in result)
