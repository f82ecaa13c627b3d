"""Dispatch core: turns a call request into a result envelope, never raising."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .adapters import DEFAULT_EMPTY_MESSAGE, Operation
from .api_client import ApiClient
from .errors import (
    ApiError,
    ArgumentValidationError,
    CatalogueMismatchError,
    ToolbridgeError,
    UnknownToolError,
)
from .registry import SchemaRegistry
from .schema import ToolCallRequest, ToolCallResult, ToolDescriptor
from .validation import validate_arguments

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    OK = "ok"
    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    outcome: DispatchOutcome
    result: ToolCallResult

    @property
    def ok(self) -> bool:
        return self.outcome is DispatchOutcome.OK


class Dispatcher:
    """Resolves tool names to adapters and settles every call into an envelope.

    The registry and the adapter mapping must name exactly the same tools;
    construction fails otherwise.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        adapters: Mapping[str, Operation],
        client: ApiClient,
    ) -> None:
        registered = set(registry.names())
        implemented = set(adapters)
        if registered != implemented:
            raise CatalogueMismatchError(
                "tool catalogue and adapters are out of sync",
                details={
                    "missing_adapters": sorted(registered - implemented),
                    "unregistered_adapters": sorted(implemented - registered),
                },
            )
        self.registry = registry
        self.client = client
        self._adapters = dict(adapters)

    def list_tools(self) -> list[ToolDescriptor]:
        return self.registry.list_tools()

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolCallResult:
        settled = await self.dispatch(ToolCallRequest.model_construct(name=name, arguments=arguments))
        return settled.result

    async def dispatch(self, request: ToolCallRequest) -> DispatchResult:
        name = request.name
        log_extra = {"tool": name}

        descriptor = self.registry.get_tool(name)
        adapter = self._adapters.get(name)
        if descriptor is None or adapter is None:
            logger.warning("unknown tool requested", extra=log_extra)
            return DispatchResult(
                DispatchOutcome.UNKNOWN_TOOL,
                ToolCallResult.error(str(UnknownToolError(name))),
            )

        try:
            arguments = validate_arguments(descriptor.input_schema, request.arguments)
        except ArgumentValidationError as exc:
            logger.info("invalid arguments field=%s", exc.field, extra=log_extra)
            return DispatchResult(DispatchOutcome.INVALID_ARGUMENTS, ToolCallResult.error(str(exc)))

        started = time.perf_counter()
        logger.info("tool invoked args=%s", sorted(arguments), extra=log_extra)
        try:
            result = await adapter(arguments, self.client)
            if not isinstance(result, ToolCallResult):
                result = ToolCallResult.from_payload(result, empty_message=DEFAULT_EMPTY_MESSAGE)
        except ApiError as exc:
            logger.info(
                "tool failed status=%s duration_ms=%s",
                exc.status,
                _elapsed_ms(started),
                extra=log_extra,
            )
            return DispatchResult(DispatchOutcome.FAILED, ToolCallResult.error(str(exc)))
        except ToolbridgeError as exc:
            logger.info("tool rejected error=%s", exc, extra=log_extra)
            return DispatchResult(DispatchOutcome.FAILED, ToolCallResult.error(str(exc)))
        except Exception as exc:
            logger.exception("tool raised unexpectedly", extra=log_extra)
            message = str(exc) or exc.__class__.__name__
            return DispatchResult(DispatchOutcome.FAILED, ToolCallResult.error(message))

        logger.info("tool completed duration_ms=%s", _elapsed_ms(started), extra=log_extra)
        return DispatchResult(DispatchOutcome.OK, result)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["DispatchOutcome", "DispatchResult", "Dispatcher"]
