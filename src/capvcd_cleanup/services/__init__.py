# SPDX-License-Identifier: GPL-3.0-or-later
from .vcd import VCDService  # noqa: F401
