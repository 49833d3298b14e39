"""Shared fixtures."""

import json
import random

import pytest

from faceoff.repositories.session_repository import SessionRepository
from faceoff.services.change_broadcaster import ChangeBroadcaster
from faceoff.services.signup_registry import SignupRegistry


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repository():
    repo = SessionRepository(":memory:")
    yield repo
    repo.close()


@pytest.fixture
def broadcaster():
    return ChangeBroadcaster()


@pytest.fixture
def registry(repository, broadcaster):
    return SignupRegistry(repository, broadcaster, rng=random.Random(7))


@pytest.fixture
def viewer(broadcaster):
    """A registered connection used to observe emitted events."""
    return broadcaster.register()


def drain_types(connection) -> list[str]:
    types = []
    while not connection.queue.empty():
        types.append(json.loads(connection.queue.get_nowait())["type"])
    return types
