"""Base service class with common functionality for all engine services."""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable

from pydantic import BaseModel

from cafe_backoffice.config import Settings, get_settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.exceptions import BackofficeError
from cafe_backoffice.utils.clock import Clock, SystemClock
from cafe_backoffice.utils.logging import ServiceLogger


class ToolResult(BaseModel):
    """Result from a tool execution."""

    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    error_code: str | None = None
    execution_time_ms: float = 0.0


class BaseService(ABC):
    """Base class for all engine services."""

    def __init__(
        self,
        service_id: str,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        self.service_id = service_id
        self.database = database
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()
        self.logger = ServiceLogger(service_id)

        # Tool registry
        self.tools: dict[str, Callable] = {}

    @abstractmethod
    def register_tools(self) -> None:
        """Register available tools for this service."""
        pass

    def execute_tool(self, tool_name: str, params: dict[str, Any]) -> ToolResult:
        """
        Execute a registered tool.

        Domain errors are reported on the result; anything else propagates.

        Args:
            tool_name: Name of the tool to execute
            params: Keyword arguments for the tool

        Returns:
            ToolResult with the execution outcome
        """
        start_time = time.time()

        if tool_name not in self.tools:
            return ToolResult(
                tool_name=tool_name,
                success=False,
                error=f"Tool '{tool_name}' not found",
                error_code="NOT_FOUND",
            )

        try:
            result = self.tools[tool_name](**params)
        except BackofficeError as e:
            execution_time_ms = (time.time() - start_time) * 1000

            self.logger.log_tool_call(
                tool_name=tool_name,
                duration_ms=execution_time_ms,
                success=False,
                error=e.message,
                error_code=e.code,
            )

            return ToolResult(
                tool_name=tool_name,
                success=False,
                error=e.message,
                error_code=e.code,
                execution_time_ms=execution_time_ms,
            )

        execution_time_ms = (time.time() - start_time) * 1000

        self.logger.log_tool_call(
            tool_name=tool_name,
            duration_ms=execution_time_ms,
            success=True,
        )

        return ToolResult(
            tool_name=tool_name,
            success=True,
            result=result,
            execution_time_ms=execution_time_ms,
        )

    def register_tool(self, name: str, func: Callable) -> None:
        """Register a tool with the service."""
        self.tools[name] = func
