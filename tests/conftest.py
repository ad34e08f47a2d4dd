from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import World


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def world(fixed_now) -> World:
    return World(fixed_now)


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.clubhub.clubhub.main import create_app

    app = create_app(container=world.container())
    return app.test_client()


@pytest.fixture
def auth_header(world):
    def make(user):
        return {"Authorization": f"Bearer {world.token_for(user)}"}

    return make
