import asyncio
from contextlib import asynccontextmanager

import pytest

from step_common.bus import InMemoryBus
from step_common.result import OK

from app.models.elb import ELBEvent, Port
from app.settings import Settings

# Canonical wire form of the event built by `test_event` below
VALID_PAYLOAD = (
    b'{"_uuid":"test","_batch_id":"test","_type":"aws","vpc_id":"vpc-0000000",'
    b'"datacenter_region":"eu-west-1","datacenter_secret":"key","datacenter_token":"token",'
    b'"name":"test-elb","is_private":false,'
    b'"ports":[{"from_port":80,"to_port":80,"protocol":"HTTP"}],'
    b'"network_aws_ids":["subnet-0000000"],"instance_aws_ids":["i-0000000"],'
    b'"security_group_aws_ids":["sg-0000000"]}'
)


def make_event(**overrides) -> ELBEvent:
    fields = dict(
        id="test",
        batch_id="test",
        provider_type="aws",
        vpc_id="vpc-0000000",
        datacenter_region="eu-west-1",
        datacenter_secret="key",
        datacenter_token="token",
        name="test-elb",
        is_private=False,
        ports=[Port(from_port=80, to_port=80, protocol="HTTP")],
        network_aws_ids=["subnet-0000000"],
        instance_aws_ids=["i-0000000"],
        security_group_aws_ids=["sg-0000000"],
    )
    fields.update(overrides)
    return ELBEvent(**fields)


class StubExecutor:
    """Returns a canned outcome and records what it was asked to do."""

    def __init__(self, outcome=OK, delay: float = 0.0, raises: Exception | None = None):
        self.outcome = outcome
        self.delay = delay
        self.raises = raises
        self.calls = []

    async def execute(self, envelope):
        self.calls.append(envelope)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        return self.outcome


class FakeRabbit(InMemoryBus):
    """InMemoryBus plus the consume/cancel surface of RabbitBus."""

    def __init__(self):
        super().__init__()
        self.callback = None
        self.bound = None
        self.cancelled = False

    async def consume(self, subject, queue_name, callback):
        self.bound = (subject, queue_name)
        self.callback = callback

    async def cancel(self):
        self.cancelled = True


class FakeMessage:
    def __init__(self, body: bytes):
        self.body = body
        self.acked = False
        self.requeued = None

    @asynccontextmanager
    async def process(self, requeue=False, ignore_processed=False):
        try:
            yield self
        except BaseException:
            self.requeued = requeue
            raise
        else:
            self.acked = True


@pytest.fixture
def test_event() -> ELBEvent:
    return make_event()


@pytest.fixture
def valid_payload() -> bytes:
    return VALID_PAYLOAD


@pytest.fixture
def bus() -> InMemoryBus:
    return InMemoryBus()


@pytest.fixture
def delete_settings() -> Settings:
    return Settings(STEP_ACTION="delete", STEP_PROVIDER="aws", ACTION_TIMEOUT_SECONDS=1.0)


@pytest.fixture
def create_settings() -> Settings:
    return Settings(STEP_ACTION="create", STEP_PROVIDER="aws", ACTION_TIMEOUT_SECONDS=1.0)
