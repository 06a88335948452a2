from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

import pytest

from models.records import Coordinates
from services.deadline import Deadline
from services.errors import NotFound

SALVADOR = Coordinates(latitude="-23.5505", longitude="-46.6333", city="Salvador")


class FakeGeocoder:
    def __init__(
        self,
        result: Optional[Coordinates] = SALVADOR,
        error: Optional[Exception] = None,
    ) -> None:
        self.result = result
        self.error = error
        self.calls: List[Tuple[str, str, Deadline]] = []

    async def resolve(self, cep: str, credential: str, deadline: Deadline) -> Coordinates:
        self.calls.append((cep, credential, deadline))
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise NotFound()
        return self.result


class FakeWeather:
    def __init__(self, celsius: float = 25.0, error: Optional[Exception] = None) -> None:
        self.celsius = celsius
        self.error = error
        self.calls: List[Tuple[Coordinates, Deadline]] = []

    async def resolve(self, coordinates: Coordinates, deadline: Deadline) -> float:
        self.calls.append((coordinates, deadline))
        if self.error is not None:
            raise self.error
        return self.celsius


class RecordingTracer:
    def __init__(self) -> None:
        self.stages: List[str] = []

    @contextmanager
    def stage(self, name: str, **attributes: Any) -> Iterator[None]:
        self.stages.append(name)
        yield


@pytest.fixture()
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture()
def weather() -> FakeWeather:
    return FakeWeather()
