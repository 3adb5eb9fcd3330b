import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, TypeVar

from pydantic import BaseModel

from .logging import get_logger

TRequest = TypeVar("TRequest", bound=BaseModel)
TResponse = TypeVar("TResponse", bound=BaseModel)

logger = get_logger(__name__)


class BaseComponent(ABC, Generic[TRequest, TResponse]):
    """Contract shared by the analyzers and the estimation engine.

    Components expose their named operations directly; ``process`` accepts a
    single request model so a caller (HTTP layer, job runner) can drive any
    component the same way.
    """

    @property
    @abstractmethod
    def component_name(self) -> str:
        """Identifier used in log events and error payloads."""

    @abstractmethod
    async def process(self, request: TRequest) -> TResponse:
        """Handle one request model."""

    async def health_check(self) -> Dict[str, Any]:
        return {"component": self.component_name, "status": "healthy"}

    async def __call__(self, request: TRequest) -> TResponse:
        started = time.perf_counter()
        response = await self.process(request)
        logger.debug(
            "component_processed",
            component=self.component_name,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
