"""Random identifier sets for the IDE's telemetry identity."""

from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass

# logical field -> key used in storage.json and ItemTable
IDENTITY_KEYS: dict[str, str] = {
    "device_id": "telemetry.devDeviceId",
    "mac_machine_id": "telemetry.macMachineId",
    "machine_id": "telemetry.machineId",
    "sqm_id": "telemetry.sqmId",
    "service_machine_id": "storage.serviceMachineId",
}


@dataclass(frozen=True, slots=True)
class IdentitySet:
    """One coherent set of identifiers; always generated together."""

    device_id: str
    machine_id: str
    mac_machine_id: str
    sqm_id: str
    service_machine_id: str

    def to_store(self) -> dict[str, str]:
        """Map to storage keys, in the order the IDE writes them."""
        return {store_key: getattr(self, name) for name, store_key in IDENTITY_KEYS.items()}


def generate_identity() -> IdentitySet:
    device_id = str(uuid.uuid4())
    return IdentitySet(
        device_id=device_id,
        machine_id=hashlib.sha256(secrets.token_bytes(32)).hexdigest(),
        mac_machine_id=hashlib.sha512(secrets.token_bytes(64)).hexdigest(),
        sqm_id="{" + str(uuid.uuid4()).upper() + "}",
        service_machine_id=device_id,
    )
