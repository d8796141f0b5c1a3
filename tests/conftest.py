from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Tuple

import pytest

from envbind import Environment, FieldDescriptor


class SetRecorder:
    """Collects ``on_set`` callbacks as ``(field name, raw value)`` pairs."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.descriptors: List[FieldDescriptor] = []

    def __call__(self, descriptor: FieldDescriptor, raw: str) -> None:
        self.descriptors.append(descriptor)
        self.calls.append((descriptor.name, raw))

    @property
    def fields(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def config_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Set (or, with ``None``, delete) variables in ``os.environ`` for one test."""

    def apply(**env: Any) -> None:
        for key, value in env.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, str(value))

    return apply


@pytest.fixture
def env_factory() -> Callable[..., Environment]:
    """Build an ``Environment`` over a private dict, leaving ``os.environ`` alone."""

    def factory(values: Dict[str, str] | None = None, **extra: str) -> Environment:
        mapping: Dict[str, str] = dict(values or {})
        mapping.update(extra)
        return Environment(mapping)

    return factory


@pytest.fixture
def recorder() -> SetRecorder:
    return SetRecorder()


@pytest.fixture
def reset_structlog() -> Iterable[None]:
    import logging

    import structlog

    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    envbind_logger = logging.getLogger("envbind")
    for handler in envbind_logger.handlers[:]:
        envbind_logger.removeHandler(handler)
    envbind_logger.propagate = True
    envbind_logger.setLevel(logging.NOTSET)
