"""Secondary machine identifier in the Windows registry (SQMClient)."""

from __future__ import annotations

import sys
import uuid
from typing import Callable

SQM_CLIENT_KEY = r"SOFTWARE\Microsoft\SQMClient"

SecondaryIdWriter = Callable[[str], None]


def new_sqm_guid() -> str:
    return "{" + str(uuid.uuid4()).upper() + "}"


def write_sqm_machine_id(value: str) -> None:
    """Set HKLM\\...\\SQMClient MachineId. Needs admin rights; raises OSError otherwise."""
    import winreg

    with winreg.CreateKeyEx(
        winreg.HKEY_LOCAL_MACHINE, SQM_CLIENT_KEY, 0, winreg.KEY_SET_VALUE
    ) as key:
        winreg.SetValueEx(key, "MachineId", 0, winreg.REG_SZ, value)


def default_secondary_writer(platform: str | None = None) -> SecondaryIdWriter | None:
    if (platform or sys.platform) == "win32":
        return write_sqm_machine_id
    return None
