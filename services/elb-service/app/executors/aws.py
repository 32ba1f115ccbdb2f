# app/executors/aws.py
"""
AWS Classic ELB actions.

Credentials travel with each event, so a client is built per envelope rather
than cached. The SDK is blocking; calls run in a worker thread so the event
loop keeps serving other messages.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Union

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from step_common.result import OK, ActionError, Ok

from app.models.elb import ELBEvent, Port

log = logging.getLogger("elb.aws")

ClientFactory = Callable[[ELBEvent], Any]


def elb_client(ev: ELBEvent, *, max_attempts: int = 5):
    """Classic ELB client scoped to the event's region and credentials."""
    return boto3.client(
        "elb",
        region_name=ev.datacenter_region,
        aws_access_key_id=ev.datacenter_secret,
        aws_secret_access_key=ev.datacenter_token,
        config=Config(retries={"max_attempts": max_attempts, "mode": "standard"}),
    )


def _listener(p: Port) -> Dict[str, Any]:
    listener: Dict[str, Any] = {
        "Protocol": p.protocol,
        "LoadBalancerPort": p.from_port,
        "InstanceProtocol": p.protocol,
        "InstancePort": p.to_port,
    }
    if p.ssl_cert:
        listener["SSLCertificateId"] = p.ssl_cert
    return listener


class AwsElbExecutor(ABC):
    """Runs one blocking ELB call per envelope; subclasses supply `_run`."""

    def __init__(self, *, max_attempts: int = 5, client_factory: ClientFactory | None = None):
        self.max_attempts = max_attempts
        self.client_factory = client_factory or (lambda ev: elb_client(ev, max_attempts=self.max_attempts))

    async def execute(self, ev: ELBEvent) -> Union[Ok, ActionError]:
        try:
            await asyncio.to_thread(self._run, ev)
        except (BotoCoreError, ClientError) as e:
            return ActionError(str(e))
        return OK

    @abstractmethod
    def _run(self, ev: ELBEvent) -> None: ...


class AwsElbDeleter(AwsElbExecutor):
    def _run(self, ev: ELBEvent) -> None:
        svc = self.client_factory(ev)
        svc.delete_load_balancer(LoadBalancerName=ev.name)
        log.info("deleted load balancer %s in %s", ev.name, ev.datacenter_region)


class AwsElbCreator(AwsElbExecutor):
    def _run(self, ev: ELBEvent) -> None:
        svc = self.client_factory(ev)
        req: Dict[str, Any] = {
            "LoadBalancerName": ev.name,
            "Listeners": [_listener(p) for p in ev.ports],
            "Subnets": list(ev.network_aws_ids),
            "SecurityGroups": list(ev.security_group_aws_ids),
        }
        if ev.is_private:
            req["Scheme"] = "internal"

        resp = svc.create_load_balancer(**req)
        log.info("created load balancer %s dns=%s", ev.name, resp.get("DNSName"))

        if ev.instance_aws_ids:
            instances: List[Dict[str, str]] = [{"InstanceId": i} for i in ev.instance_aws_ids]
            svc.register_instances_with_load_balancer(LoadBalancerName=ev.name, Instances=instances)
            log.info("registered %d instance(s) with %s", len(instances), ev.name)
