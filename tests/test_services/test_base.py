"""Tests for base service functionality."""

import pytest

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.exceptions import InvalidArgumentError
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.services.recipes import RecipeResolver


class EchoService(BaseService):
    """Minimal service used to exercise the tool registry."""

    def __init__(self, database: Database, settings: Settings):
        super().__init__("echo", database, settings)
        self.register_tools()

    def register_tools(self) -> None:
        self.register_tool("echo", self.echo)
        self.register_tool("reject", self.reject)
        self.register_tool("explode", self.explode)

    def echo(self, value: str) -> dict:
        return {"value": value}

    def reject(self) -> None:
        raise InvalidArgumentError("value required")

    def explode(self) -> None:
        raise RuntimeError("boom")


def test_service_initialization(database: Database, settings: Settings) -> None:
    """Test that services initialize correctly."""
    service = RecipeResolver(database, settings)

    assert service.service_id == "recipe_resolver"
    assert service.database is database
    assert service.settings is settings
    assert len(service.tools) > 0


def test_service_tool_registration(database: Database, settings: Settings) -> None:
    """Test that service tools are registered."""
    service = RecipeResolver(database, settings)

    assert "resolve_recipe" in service.tools
    assert "check_availability" in service.tools
    assert "recipe_cost" in service.tools


def test_service_tool_execution(database: Database, settings: Settings) -> None:
    """Test service tool execution."""
    service = EchoService(database, settings)

    result = service.execute_tool("echo", {"value": "espresso"})

    assert result.success is True
    assert result.tool_name == "echo"
    assert result.result == {"value": "espresso"}
    assert result.error is None
    assert result.execution_time_ms >= 0


def test_unknown_tool_is_reported(database: Database, settings: Settings) -> None:
    """Test that an unregistered tool fails without raising."""
    service = EchoService(database, settings)

    result = service.execute_tool("missing", {})

    assert result.success is False
    assert result.error_code == "NOT_FOUND"
    assert "missing" in result.error


def test_domain_error_is_captured(database: Database, settings: Settings) -> None:
    """Test that engine errors become failed results with their code."""
    service = EchoService(database, settings)

    result = service.execute_tool("reject", {})

    assert result.success is False
    assert result.error == "value required"
    assert result.error_code == "INVALID_ARGUMENT"


def test_unexpected_error_propagates(database: Database, settings: Settings) -> None:
    """Test that programming errors are not swallowed."""
    service = EchoService(database, settings)

    with pytest.raises(RuntimeError, match="boom"):
        service.execute_tool("explode", {})
