from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from walkdraw import models  # noqa: F401
from walkdraw.ai.relay import PromptRelay
from walkdraw.api.deps import get_db, get_relay
from walkdraw.exceptions import UpstreamError
from walkdraw.main import create_app


class FakeLLM:
    """Stands in for LLMClient; records prompts and replies with a canned answer."""

    def __init__(self) -> None:
        self.prompts: list[str] = []
        self.reply = "A cat sitting on a windowsill."
        self.fail = False

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise UpstreamError("Provider test-model request failed")
        return self.reply


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def client(engine: Engine, fake_llm: FakeLLM) -> Generator[TestClient, None, None]:
    app = create_app(create_tables=False)

    def override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_relay] = lambda: PromptRelay(llm=fake_llm)  # type: ignore[arg-type]
    with TestClient(app) as c:
        yield c
