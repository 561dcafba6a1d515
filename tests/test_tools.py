"""Tests for tools and the tool executor."""

from unittest.mock import MagicMock

import pytest
from pydantic import Field

from aurora_assistant.core import ToolExecutor
from aurora_assistant.exceptions import (
    IntegrationError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
    UnknownAgentError,
)
from aurora_assistant.integrations.google_calendar import GoogleCalendarClient
from aurora_assistant.storage import IdeaFolder
from aurora_assistant.tools import (
    BaseTool,
    ToolContext,
    ToolParams,
    create_calendar_tools,
    create_ideas_tools,
)
from aurora_assistant.types import ToolCall


class EchoParams(ToolParams):
    text: str = Field(description="Text to echo")


class EchoTool(BaseTool):
    params_model = EchoParams

    @property
    def name(self) -> str:
        return "echo"

    @property
    def description(self) -> str:
        return "Echo the text back"

    def execute(self, params: EchoParams, context: ToolContext) -> str:
        return params.text


class FailingTool(BaseTool):
    def __init__(self, error: Exception):
        self.error = error

    @property
    def name(self) -> str:
        return "fail"

    @property
    def description(self) -> str:
        return "Always fails"

    def execute(self, params, context):
        raise self.error


class TestBaseTool:
    def test_schema_from_params_model(self):
        schema = EchoTool().to_schema()
        assert schema["type"] == "function"
        assert schema["function"]["name"] == "echo"
        assert schema["function"]["parameters"]["required"] == ["text"]
        assert schema["function"]["parameters"]["additionalProperties"] is False

    def test_parameterless_tool_schema(self):
        tool = FailingTool(RuntimeError())
        assert tool.parameters == {"type": "object", "properties": {}, "additionalProperties": False}

    def test_validate_rejects_unknown_keys(self):
        with pytest.raises(ToolValidationError) as exc_info:
            EchoTool().validate({"text": "hi", "extra": 1})
        assert exc_info.value.tool_name == "echo"

    def test_validate_rejects_missing_keys(self):
        with pytest.raises(ToolValidationError):
            EchoTool().validate({})

    def test_parameterless_tool_rejects_arguments(self):
        with pytest.raises(ToolValidationError):
            FailingTool(RuntimeError()).validate({"x": 1})


class TestToolExecutor:
    def test_executes_by_name(self):
        executor = ToolExecutor([EchoTool()], owner="tester")
        call = ToolCall(id="call_1", name="echo", arguments={"text": "hi"})

        result = executor.execute_single_tool(call, ToolContext())

        assert result.tool_call is call
        assert result.content == "hi"

    def test_unknown_tool_raises(self):
        executor = ToolExecutor([EchoTool()], owner="tester")
        with pytest.raises(ToolNotFoundError) as exc_info:
            executor.execute_single_tool(ToolCall(id="c", name="missing", arguments={}), ToolContext())
        assert exc_info.value.agent_name == "tester"

    def test_handler_error_is_wrapped(self):
        executor = ToolExecutor([FailingTool(RuntimeError("boom"))])
        with pytest.raises(ToolExecutionError) as exc_info:
            executor.execute_single_tool(ToolCall(id="c", name="fail", arguments={}), ToolContext())
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_agent_errors_pass_through(self):
        executor = ToolExecutor([FailingTool(UnknownAgentError("Nobody"))])
        with pytest.raises(UnknownAgentError):
            executor.execute_single_tool(ToolCall(id="c", name="fail", arguments={}), ToolContext())

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ToolExecutor([EchoTool(), EchoTool()])

    def test_results_keep_call_order(self):
        executor = ToolExecutor([EchoTool()])
        calls = [
            ToolCall(id="a", name="echo", arguments={"text": "first"}),
            ToolCall(id="b", name="echo", arguments={"text": "second"}),
        ]
        results = executor.execute_tool_calls(calls, ToolContext())
        assert [r.content for r in results] == ["first", "second"]


class TestCalendarTools:
    @pytest.fixture
    def calendar(self):
        return MagicMock(spec=GoogleCalendarClient)

    @pytest.fixture
    def tools(self, calendar):
        return {tool.name: tool for tool in create_calendar_tools(calendar, lambda: "tok")}

    def test_tool_names(self, tools):
        assert set(tools) == {"get_calendars", "get_events", "create_event"}

    def test_get_events_passes_bounds(self, calendar, tools):
        calendar.get_events.return_value = []
        tool = tools["get_events"]
        params = tool.validate({"calendar_id": "primary", "time_min": "2024-01-01T00:00:00Z"})

        assert tool.execute(params, ToolContext()) == []
        calendar.get_events.assert_called_once_with(
            "tok", "primary", time_min="2024-01-01T00:00:00Z", time_max=None
        )

    def test_create_event_builds_resource(self, calendar, tools):
        calendar.create_event.return_value = {"id": "evt_1"}
        tool = tools["create_event"]
        params = tool.validate(
            {
                "calendar_id": "primary",
                "event": {
                    "start": "2024-01-01T10:00:00+01:00",
                    "end": "2024-01-01T11:00:00+01:00",
                    "description": "Dentist",
                },
            }
        )

        assert tool.execute(params, ToolContext()) == {"id": "evt_1"}
        calendar.create_event.assert_called_once_with(
            "tok",
            "primary",
            {
                "start": {"dateTime": "2024-01-01T10:00:00+01:00"},
                "end": {"dateTime": "2024-01-01T11:00:00+01:00"},
                "description": "Dentist",
            },
        )

    def test_integration_errors_propagate(self, calendar, tools):
        calendar.get_calendars.side_effect = IntegrationError("google_calendar", "denied", 403)
        executor = ToolExecutor(list(tools.values()))
        with pytest.raises(IntegrationError):
            executor.execute_single_tool(
                ToolCall(id="c", name="get_calendars", arguments={}), ToolContext()
            )


class TestIdeasTools:
    @pytest.fixture
    def tools(self, storage, connected_user):
        return {tool.name: tool for tool in create_ideas_tools(storage, connected_user.id)}

    def test_create_idea_without_folder(self, tools, storage, connected_user):
        tool = tools["create_idea"]
        created = tool.execute(tool.validate({"name": "Podcast"}), ToolContext())

        assert created["name"] == "Podcast"
        assert created["id"].startswith("id_")
        assert storage.get_idea(connected_user.id, created["id"])["folder"] is None

    def test_create_idea_unknown_folder_returns_error(self, tools):
        tool = tools["create_idea"]
        result = tool.execute(
            tool.validate({"name": "Podcast", "folder_id": "if_missing"}), ToolContext()
        )
        assert result == {"error": "Folder not found"}

    def test_get_ideas_includes_folder(self, tools, storage, connected_user):
        folder = storage.create_folder(IdeaFolder(user_id=connected_user.id, name="Side projects"))
        create = tools["create_idea"]
        create.execute(
            create.validate({"name": "Podcast", "folder_id": folder.id}), ToolContext()
        )

        ideas = tools["get_ideas"].execute(None, ToolContext())

        assert len(ideas) == 1
        assert ideas[0]["folder"] == {"id": folder.id, "name": "Side projects"}

    def test_get_idea_by_id_is_scoped_to_user(self, tools, storage, connected_user):
        from aurora_assistant.storage import Idea, User

        storage.create_user(User(id="2002"))
        other = storage.create_idea(Idea(user_id="2002", name="Not yours"))
        tool = tools["get_idea_by_id"]

        assert tool.execute(tool.validate({"id": other.id}), ToolContext()) is None

    def test_get_folders(self, tools, storage, connected_user):
        storage.create_folder(IdeaFolder(user_id=connected_user.id, name="Books"))
        folders = tools["get_folders"].execute(None, ToolContext())
        assert [f["name"] for f in folders] == ["Books"]
