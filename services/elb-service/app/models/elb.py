# app/models/elb.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, StrictBool, StrictInt, StrictStr

from step_common.envelope import StepEnvelope, WireModel


class Port(WireModel):
    """One listener: balancer-side ``from_port`` forwarded to instance ``to_port``."""

    from_port: StrictInt = 0
    to_port: StrictInt = 0
    protocol: StrictStr = ""
    ssl_cert: Optional[StrictStr] = None  # certificate id, HTTPS/SSL listeners only


class ELBEvent(StepEnvelope):
    """
    Load balancer create/delete request as carried on ``elb.<action>.<provider>``.
    Field order is the wire order.
    """

    vpc_id: StrictStr = ""
    datacenter_region: StrictStr = ""
    datacenter_secret: StrictStr = Field(default="", repr=False)
    datacenter_token: StrictStr = Field(default="", repr=False)
    name: StrictStr = ""
    is_private: StrictBool = False
    ports: List[Port] = Field(default_factory=list)
    network_aws_ids: List[StrictStr] = Field(default_factory=list)
    instance_aws_ids: List[StrictStr] = Field(default_factory=list)
    security_group_aws_ids: List[StrictStr] = Field(default_factory=list)
