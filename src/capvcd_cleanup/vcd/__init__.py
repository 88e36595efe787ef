# SPDX-License-Identifier: GPL-3.0-or-later
from capvcd_cleanup.vcd.client import VCDClient  # noqa: F401
from capvcd_cleanup.vcd.exceptions import EntityNotFound, TaskError, VCDError  # noqa: F401
from capvcd_cleanup.vcd.models import (  # noqa: F401
    VAPP_STATUSES,
    Org,
    Rde,
    RdeType,
    Task,
    VApp,
    VCDCredentials,
    Vdc,
)
