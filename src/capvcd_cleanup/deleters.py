# SPDX-License-Identifier: GPL-3.0-or-later
"""Delete the VMware Cloud Director resources of a CAPVCD cluster.

Both deleters treat an already absent resource as success, which keeps the
cleanup safe to re-run after a partial failure.
"""
import logging

from .exceptions import (
    DeleteStartError,
    DeleteTaskError,
    DuplicateEntityError,
    LookupFailure,
    UnexpectedStateError,
)
from .state import State
from .vcd import EntityNotFound, VCDClient, VCDError

log = logging.getLogger("capvcd.cleanup")

CAPVCD_RDE_VENDOR = "vmware"
CAPVCD_RDE_NSS = "capvcdCluster"
CAPVCD_RDE_VERSION = "1.3.0"

# The only vApp status in which the platform is not reconciling the vApp.
DELETABLE_VAPP_STATUS = "RESOLVED"


def delete_capvcd_rde_by_name(client: VCDClient, rde_name: str, dry_run: bool = False) -> State:
    """
    Delete the CAPVCD cluster RDE with the given name.

    Args:
        client (VCDClient)
            The authenticated VCD client.
        rde_name (str)
            The name of the RDE, expected to be unique for the CAPVCD type.
        dry_run (bool, optional)
            Look the RDE up but do not delete it.
    Returns:
        State: ``DELETED``, ``MISSING`` when there is no such RDE or ``SKIPPED`` on dry run.
    Raises:
        LookupFailure: the CAPVCD RDE type is not registered.
        DuplicateEntityError: more than one RDE has the given name.
        DeleteStartError: VCD refused to delete the RDE.
        VCDError: the RDE query failed for a reason other than not found.
    """
    try:
        rde_type = client.get_rde_type(CAPVCD_RDE_VENDOR, CAPVCD_RDE_NSS, CAPVCD_RDE_VERSION)
    except VCDError as exc:
        raise LookupFailure(
            f"unable to get CAPVCD Cluster Rde Type v{CAPVCD_RDE_VERSION}: {exc}",
            stage="rde-type",
        ) from exc

    try:
        rdes = client.get_rdes_by_name(rde_type, rde_name)
    except EntityNotFound:
        log.info("CAPVCD RDE '%s' not found, nothing to delete.", rde_name)
        return State.MISSING

    if len(rdes) > 1:
        raise DuplicateEntityError(
            f"more than one RDE with name '{rde_name}' has been found "
            f"({', '.join(rde.id for rde in rdes)})",
            stage="rde-lookup",
        )

    rde = rdes[0]
    if dry_run:
        log.info("Would have deleted CAPVCD RDE '%s' (%s)", rde_name, rde.id)
        return State.SKIPPED

    log.info("Deleting CAPVCD RDE '%s' (%s)...", rde_name, rde.id)
    try:
        client.delete_rde(rde)
    except VCDError as exc:
        raise DeleteStartError(
            f"error deleting CAPVCD RDE with name {rde_name}: {exc}", stage="rde-delete"
        ) from exc

    log.info("CAPVCD RDE '%s' successfully deleted.", rde_name)
    return State.DELETED


def delete_vapp_by_name(
    client: VCDClient,
    org_name: str,
    vdc_name: str,
    vapp_name: str,
    dry_run: bool = False,
) -> State:
    """
    Delete the vApp with the given name once it is settled.

    Args:
        client (VCDClient)
            The authenticated VCD client.
        org_name (str)
            The organization holding the VDC.
        vdc_name (str)
            The VDC holding the vApp.
        vapp_name (str)
            The vApp name.
        dry_run (bool, optional)
            Look the vApp up and check its status but do not delete it.
    Returns:
        State: ``DELETED``, ``MISSING`` when there is no such vApp or ``SKIPPED`` on dry run.
    Raises:
        LookupFailure: the organization or the VDC could not be resolved.
        UnexpectedStateError: the vApp is not ``RESOLVED``.
        DeleteStartError: VCD refused to start the deletion.
        DeleteTaskError: the deletion task failed.
        VCDError: the vApp lookup failed for a reason other than not found.
    """
    try:
        org = client.get_org(org_name)
    except VCDError as exc:
        raise LookupFailure(f"error getting organization: {exc}", stage="org-lookup") from exc

    try:
        vdc = client.get_vdc(org, vdc_name, refresh=False)
    except VCDError as exc:
        raise LookupFailure(f"error getting VDC: {exc}", stage="vdc-lookup") from exc

    # Refresh: the RDE deletion may have changed the VDC content.
    try:
        vapp = client.get_vapp(vdc, vapp_name, refresh=True)
    except EntityNotFound:
        log.info("vApp '%s' not found, nothing to delete.", vapp_name)
        return State.MISSING

    log.info("vApp state: '%s'", vapp.status_label)
    if vapp.status_label != DELETABLE_VAPP_STATUS:
        raise UnexpectedStateError(
            f"vApp should be in {DELETABLE_VAPP_STATUS} state, found '{vapp.status_label}'",
            status=vapp.status_label,
            stage="vapp-state",
        )

    if dry_run:
        log.info("Would have deleted vApp '%s'", vapp_name)
        return State.SKIPPED

    log.info("Deleting vApp '%s'...", vapp_name)
    try:
        task = client.delete_vapp(vapp)
    except VCDError as exc:
        raise DeleteStartError(f"error deleting vApp: {exc}", stage="vapp-delete") from exc

    try:
        client.wait_task(task)
    except VCDError as exc:
        raise DeleteTaskError(
            f"error waiting for delete task completion: {exc}", stage="vapp-delete-task"
        ) from exc

    log.info("vApp '%s' successfully deleted.", vapp_name)
    return State.DELETED
