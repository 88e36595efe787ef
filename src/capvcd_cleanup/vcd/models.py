# SPDX-License-Identifier: GPL-3.0-or-later
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from attrs import Attribute, field, frozen
from attrs.validators import instance_of, optional

VAPP_STATUSES = {
    -1: "FAILED_CREATION",
    0: "UNRESOLVED",
    1: "RESOLVED",
    2: "DEPLOYED",
    3: "SUSPENDED",
    4: "POWERED_ON",
    5: "WAITING_FOR_INPUT",
    6: "UNKNOWN",
    7: "UNRECOGNIZED",
    8: "POWERED_OFF",
    9: "INCONSISTENT_STATE",
    10: "MIXED",
    11: "DESCRIPTOR_PENDING",
    12: "COPYING_CONTENTS",
    13: "DISK_CONTENTS_PENDING",
    14: "QUARANTINED",
    15: "QUARANTINE_EXPIRED",
    16: "REJECTED",
    17: "TRANSFER_TIMEOUT",
    18: "VAPP_UNDEPLOYED",
    19: "VAPP_PARTIALLY_DEPLOYED",
    20: "PARTIALLY_POWERED_OFF",
    21: "PARTIALLY_SUSPENDED",
}

TASK_TERMINAL_STATES = ("success", "error", "canceled", "aborted")


def _strip_trailing_slash(value: Any) -> Any:
    return value.rstrip("/") if isinstance(value, str) else value


@frozen
class VCDCredentials:
    """Represent the data required to open a VMware Cloud Director session."""

    url: str = field(validator=instance_of(str), converter=_strip_trailing_slash)
    """The VCD base URL, without the ``/api`` suffix."""

    org: str = field(validator=instance_of(str))
    """The organization to log in to."""

    token: str = field(validator=instance_of(str), repr=False)
    """The VCD API token. May be empty, in which case the authentication fails."""

    @url.validator
    def _validate_url(self, attribute: Attribute, value: str):
        """Validate whether the URL is an absolute http(s) URI."""
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Invalid value for {attribute.name}: {value!r} is not an absolute URL."
            )


@frozen
class Org:
    """A VCD organization."""

    name: str
    href: str
    links: List[Dict[str, Any]] = field(factory=list)
    """The links from the organization document, VDCs included."""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Org":
        """Create an Org from its JSON representation."""
        return cls(name=data["name"], href=data["href"], links=data.get("link") or [])


@frozen
class Vdc:
    """A VCD virtual datacenter."""

    name: str
    href: str
    resource_entities: List[Dict[str, Any]] = field(factory=list)
    """The resources (vApps, templates, media) living in the VDC."""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Vdc":
        """Create a Vdc from its JSON representation."""
        entities = (data.get("resourceEntities") or {}).get("resourceEntity") or []
        return cls(name=data["name"], href=data["href"], resource_entities=entities)


@frozen
class VApp:
    """A VCD virtual application."""

    name: str
    href: str
    status: int = field(validator=instance_of(int))

    @property
    def status_label(self) -> str:
        """Return the human readable status."""
        return VAPP_STATUSES.get(self.status, f"UNKNOWN({self.status})")

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "VApp":
        """Create a VApp from its JSON representation."""
        return cls(name=data["name"], href=data["href"], status=int(data["status"]))


@frozen
class RdeType:
    """A Runtime Defined Entity type."""

    id: str
    vendor: str
    nss: str
    version: str
    name: Optional[str] = field(default=None, validator=optional(instance_of(str)))

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RdeType":
        """Create a RdeType from its JSON representation."""
        return cls(
            id=data["id"],
            vendor=data["vendor"],
            nss=data["nss"],
            version=data["version"],
            name=data.get("name"),
        )


@frozen
class Rde:
    """A Runtime Defined Entity."""

    id: str
    name: str
    state: Optional[str] = None
    entity_type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Rde":
        """Create a Rde from its JSON representation."""
        return cls(
            id=data["id"],
            name=data["name"],
            state=data.get("state"),
            entity_type=data.get("entityType"),
        )


@frozen
class Task:
    """A VCD asynchronous task."""

    href: str
    status: str
    operation: str = ""
    error_message: Optional[str] = None

    @property
    def done(self) -> bool:
        """Whether the task reached a terminal state."""
        return self.status in TASK_TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        """Whether the task finished successfully."""
        return self.status == "success"

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Task":
        """Create a Task from its JSON representation."""
        error = data.get("error") or {}
        return cls(
            href=data["href"],
            status=data["status"],
            operation=data.get("operation") or "",
            error_message=error.get("message"),
        )
