# SPDX-License-Identifier: GPL-3.0-or-later
import logging
from unittest.mock import MagicMock

import pytest
from _pytest.logging import LogCaptureFixture

from capvcd_cleanup.deleters import delete_capvcd_rde_by_name, delete_vapp_by_name
from capvcd_cleanup.exceptions import (
    DeleteStartError,
    DeleteTaskError,
    DuplicateEntityError,
    LookupFailure,
    UnexpectedStateError,
)
from capvcd_cleanup.state import State
from capvcd_cleanup.vcd import (
    EntityNotFound,
    Org,
    Rde,
    RdeType,
    Task,
    TaskError,
    VApp,
    VCDClient,
    VCDError,
    Vdc,
)

CAPVCD_TYPE = RdeType(
    id="urn:vcloud:type:vmware:capvcdCluster:1.3.0",
    vendor="vmware",
    nss="capvcdCluster",
    version="1.3.0",
)


def make_rde(num: int = 1) -> Rde:
    return Rde(id=f"urn:vcloud:entity:vmware:capvcdCluster:{num}", name="test-cluster")


def make_vapp(status: int = 1) -> VApp:
    return VApp(name="test-cluster", href="https://vcd/api/vApp/vapp-1", status=status)


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock(spec=VCDClient)
    mock.get_rde_type.return_value = CAPVCD_TYPE
    mock.get_rdes_by_name.return_value = [make_rde()]
    mock.get_org.return_value = Org(name="myorg", href="https://vcd/api/org/1")
    mock.get_vdc.return_value = Vdc(name="myvdc", href="https://vcd/api/vdc/1")
    mock.get_vapp.return_value = make_vapp()
    mock.delete_vapp.return_value = Task(href="https://vcd/api/task/1", status="queued")
    mock.wait_task.return_value = Task(href="https://vcd/api/task/1", status="success")
    return mock


def test_delete_rde(client: MagicMock, caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    assert delete_capvcd_rde_by_name(client, "test-cluster") == State.DELETED

    client.get_rde_type.assert_called_once_with("vmware", "capvcdCluster", "1.3.0")
    client.get_rdes_by_name.assert_called_once_with(CAPVCD_TYPE, "test-cluster")
    client.delete_rde.assert_called_once_with(make_rde())
    assert "CAPVCD RDE 'test-cluster' successfully deleted." in caplog.messages


def test_delete_rde_missing(client: MagicMock, caplog: LogCaptureFixture) -> None:
    """An absent RDE is not an error."""
    caplog.set_level(logging.INFO)
    client.get_rdes_by_name.side_effect = EntityNotFound("no entity")

    assert delete_capvcd_rde_by_name(client, "test-cluster") == State.MISSING

    client.delete_rde.assert_not_called()
    assert "CAPVCD RDE 'test-cluster' not found, nothing to delete." in caplog.messages


def test_delete_rde_type_not_found(client: MagicMock) -> None:
    client.get_rde_type.side_effect = EntityNotFound("[404] not found")

    with pytest.raises(
        LookupFailure, match="unable to get CAPVCD Cluster Rde Type v1.3.0: \\[404\\] not found"
    ) as exc:
        delete_capvcd_rde_by_name(client, "test-cluster")

    assert exc.value.stage == "rde-type"
    client.get_rdes_by_name.assert_not_called()


def test_delete_rde_duplicates(client: MagicMock) -> None:
    client.get_rdes_by_name.return_value = [make_rde(1), make_rde(2)]

    with pytest.raises(DuplicateEntityError) as exc:
        delete_capvcd_rde_by_name(client, "test-cluster")

    assert str(exc.value) == (
        "more than one RDE with name 'test-cluster' has been found "
        "(urn:vcloud:entity:vmware:capvcdCluster:1, urn:vcloud:entity:vmware:capvcdCluster:2)"
    )
    client.delete_rde.assert_not_called()


def test_delete_rde_query_failure(client: MagicMock) -> None:
    """Failures other than not found are propagated."""
    client.get_rdes_by_name.side_effect = VCDError("[500] Internal Server Error")

    with pytest.raises(VCDError, match="Internal Server Error"):
        delete_capvcd_rde_by_name(client, "test-cluster")

    client.delete_rde.assert_not_called()


def test_delete_rde_rejected(client: MagicMock) -> None:
    client.delete_rde.side_effect = VCDError("[400] RDE is busy")

    with pytest.raises(
        DeleteStartError, match="error deleting CAPVCD RDE with name test-cluster: \\[400\\]"
    ):
        delete_capvcd_rde_by_name(client, "test-cluster")


def test_delete_rde_dry_run(client: MagicMock) -> None:
    assert delete_capvcd_rde_by_name(client, "test-cluster", dry_run=True) == State.SKIPPED

    client.delete_rde.assert_not_called()


def test_delete_vapp(client: MagicMock, caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    state = delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster")

    assert state == State.DELETED
    client.get_org.assert_called_once_with("myorg")
    client.get_vdc.assert_called_once_with(client.get_org.return_value, "myvdc", refresh=False)
    client.get_vapp.assert_called_once_with(
        client.get_vdc.return_value, "test-cluster", refresh=True
    )
    client.delete_vapp.assert_called_once_with(make_vapp())
    client.wait_task.assert_called_once_with(client.delete_vapp.return_value)
    assert caplog.messages == [
        "vApp state: 'RESOLVED'",
        "Deleting vApp 'test-cluster'...",
        "vApp 'test-cluster' successfully deleted.",
    ]


def test_delete_vapp_missing(client: MagicMock) -> None:
    client.get_vapp.side_effect = EntityNotFound("vApp 'test-cluster' not found")

    assert delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster") == State.MISSING

    client.delete_vapp.assert_not_called()


@pytest.mark.parametrize(
    "method, message, stage",
    [
        ("get_org", "error getting organization: ", "org-lookup"),
        ("get_vdc", "error getting VDC: ", "vdc-lookup"),
    ],
)
def test_delete_vapp_lookup_failure(
    client: MagicMock, method: str, message: str, stage: str
) -> None:
    """Missing organization or VDC is fatal, unlike a missing vApp."""
    getattr(client, method).side_effect = EntityNotFound("not found")

    with pytest.raises(LookupFailure, match=message + "not found") as exc:
        delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster")

    assert exc.value.stage == stage
    client.delete_vapp.assert_not_called()


@pytest.mark.parametrize(
    "status, label",
    [(4, "POWERED_ON"), (8, "POWERED_OFF"), (0, "UNRESOLVED"), (99, "UNKNOWN(99)")],
)
def test_delete_vapp_not_resolved(client: MagicMock, status: int, label: str) -> None:
    client.get_vapp.return_value = make_vapp(status)

    with pytest.raises(UnexpectedStateError) as exc:
        delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster")

    assert str(exc.value) == f"vApp should be in RESOLVED state, found '{label}'"
    assert exc.value.status == label
    client.delete_vapp.assert_not_called()


def test_delete_vapp_rejected(client: MagicMock) -> None:
    client.delete_vapp.side_effect = VCDError("[400] vApp is busy")

    with pytest.raises(DeleteStartError, match="error deleting vApp: \\[400\\] vApp is busy"):
        delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster")

    client.wait_task.assert_not_called()


def test_delete_vapp_task_failed(client: MagicMock) -> None:
    client.wait_task.side_effect = TaskError("task finished with status 'error'")

    with pytest.raises(
        DeleteTaskError, match="error waiting for delete task completion: task finished"
    ) as exc:
        delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster")

    assert exc.value.stage == "vapp-delete-task"


def test_delete_vapp_dry_run(client: MagicMock) -> None:
    """The status is still checked on dry run."""
    assert delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster", dry_run=True) == (
        State.SKIPPED
    )
    client.delete_vapp.assert_not_called()

    client.get_vapp.return_value = make_vapp(4)
    with pytest.raises(UnexpectedStateError):
        delete_vapp_by_name(client, "myorg", "myvdc", "test-cluster", dry_run=True)
