"""
Request and project context

contextvars keep request_id and project_id isolated per asyncio task so that
log lines emitted deep inside the pipeline still carry them.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
project_id_var: ContextVar[str | None] = ContextVar("project_id", default=None)


def get_request_id() -> str | None:
    """Return the current request_id"""
    return request_id_var.get()


def get_project_id() -> str | None:
    """Return the current project_id"""
    return project_id_var.get()


@contextmanager
def bind_request(request_id: str | None = None) -> Iterator[str]:
    """
    Bind request_id for the duration of the block

    Generates an 8 character id when none is given. An id already bound by
    an outer block is kept, so nested service calls log under one request.
    """
    if request_id is None:
        request_id = request_id_var.get() or uuid.uuid4().hex[:8]
    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)


@contextmanager
def bind_project(project_id: str | None) -> Iterator[None]:
    """Bind project_id for the duration of the block"""
    token = project_id_var.set(project_id)
    try:
        yield
    finally:
        project_id_var.reset(token)
