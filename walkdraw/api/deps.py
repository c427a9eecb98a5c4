from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from walkdraw.ai.relay import PromptRelay
from walkdraw.core.db import get_engine


def get_db() -> Generator[Session, None, None]:
    # The context manager closes the session on success and on every error path
    with Session(get_engine()) as session:
        yield session


@lru_cache
def get_relay() -> PromptRelay:
    return PromptRelay()


SessionDep = Annotated[Session, Depends(get_db)]
RelayDep = Annotated[PromptRelay, Depends(get_relay)]
