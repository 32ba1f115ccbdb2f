# app/validation.py
from __future__ import annotations

from step_common.events import Action
from step_common.validation import Check, Validator, non_empty

from app.models.elb import ELBEvent

PROTOCOLS = frozenset({"HTTP", "HTTPS", "TCP", "SSL"})

# Order matters: the first failing check is the one reported.
BASE_CHECKS = [
    non_empty("vpc_id", "Datacenter VPC ID invalid"),
    non_empty("datacenter_region", "Datacenter Region invalid"),
    non_empty("datacenter_secret", "Datacenter credentials invalid"),
    non_empty("datacenter_token", "Datacenter credentials invalid"),
    non_empty("name", "ELB name is invalid"),
]


def _valid_port(n: int) -> bool:
    return 1 <= n <= 65535


# Listener checks only apply when creating; a delete ignores ports entirely.
CREATE_CHECKS = [
    Check(lambda e: len(e.ports) > 0, "ELB must contain ports"),
    Check(
        lambda e: all(_valid_port(p.from_port) and _valid_port(p.to_port) for p in e.ports),
        "ELB port is invalid",
    ),
    Check(lambda e: all(p.protocol in PROTOCOLS for p in e.ports), "ELB protocol is invalid"),
]


def validator_for(action: Action) -> Validator[ELBEvent]:
    base: Validator[ELBEvent] = Validator(BASE_CHECKS)
    if action == Action.CREATE:
        return base.extend(CREATE_CHECKS)
    return base
