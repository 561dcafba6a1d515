"""Tests for agent execution and the specialist agents."""

import json
from unittest.mock import MagicMock

import pytest

from aurora_assistant.integrations.google_calendar import GoogleCalendarClient
from aurora_assistant.network import (
    INFERENCE_RECORDS_KEY,
    Agent,
    AgentInvocation,
    Network,
    NetworkState,
    RoutingAgent,
)
from aurora_assistant.network.agent import split_output
from aurora_assistant.network.agents import (
    create_calendar_agent,
    create_executive_agent,
    create_ideas_agent,
)
from aurora_assistant.network.agents.ideas import IDEAS_AGENT_NAME, IdeasAgent
from aurora_assistant.storage import InferenceRecord
from aurora_assistant.tools import BaseTool, ToolContext
from aurora_assistant.types import AgentResult, MessageRole, ToolCall, UnifiedMessage

from .conftest import done, scripted_client, select, text_response, tool_response


class ContextRecorderTool(BaseTool):
    def __init__(self):
        self.contexts: list[ToolContext] = []

    @property
    def name(self) -> str:
        return "record"

    @property
    def description(self) -> str:
        return "Records its context"

    def execute(self, params, context: ToolContext) -> dict:
        self.contexts.append(context)
        return {"recorded": True}


class StoppingAgent(Agent):
    def before_invoke(self, invocation: AgentInvocation) -> AgentInvocation:
        invocation.stop = True
        return invocation


class TestAgentRun:
    def test_default_prompt_is_system_then_user(self):
        client = scripted_client(text_response("Hi!"))
        agent = Agent(name="greeter", description="Greets", system="Be nice.", client=client)

        result = agent.run("hello")

        messages = client.generate.call_args.kwargs["messages"]
        assert [m.role for m in messages] == [MessageRole.SYSTEM, MessageRole.USER]
        assert messages[0].content == "Be nice."
        assert messages[1].content == "hello"
        assert result.output[0].content == "Hi!"
        assert result.raw != ""

    def test_history_comes_from_state(self):
        client = scripted_client(text_response("done"))
        agent = Agent(name="greeter", description="Greets", system="Be nice.", client=client)
        state = NetworkState()
        state.append_result(
            AgentResult(
                agent_name="other",
                output=[UnifiedMessage(role=MessageRole.ASSISTANT, content="earlier step")],
            )
        )

        agent.run("hello", state=state)

        messages = client.generate.call_args.kwargs["messages"]
        assert messages[-1].content == "earlier step"

    def test_tools_are_executed_with_context(self):
        tool = ContextRecorderTool()
        client = scripted_client(tool_response("record", call_id="call_9"))
        agent = Agent(name="worker", description="Works", system="Work.", client=client, tools=[tool])
        state = NetworkState()

        result = agent.run("go", state=state)

        assert client.generate.call_args.kwargs["tools"] == [tool]
        assert client.generate.call_args.kwargs["tool_choice"] == "auto"
        assert result.tool_results[0].content == {"recorded": True}
        assert tool.contexts[0].state is state
        assert tool.contexts[0].agent is agent

    def test_agent_without_tools_sends_none(self):
        client = scripted_client(text_response("ok"))
        Agent(name="a", description="", system="s", client=client).run("x")
        assert client.generate.call_args.kwargs["tools"] is None

    def test_stop_skips_model_call(self, mock_client):
        agent = StoppingAgent(name="quiet", description="", system="s", client=mock_client)

        result = agent.run("hello")

        mock_client.generate.assert_not_called()
        assert result.raw == ""
        assert result.output == []


class TestSplitOutput:
    def test_text_and_tool_calls_become_two_entries(self, sample_tool_call):
        message = UnifiedMessage(
            role=MessageRole.ASSISTANT, content="Checking", tool_calls=[sample_tool_call]
        )
        output = split_output(message)
        assert output[0].content == "Checking"
        assert output[1].tool_calls == [sample_tool_call]

    def test_empty_message_yields_empty_text(self):
        output = split_output(UnifiedMessage(role=MessageRole.ASSISTANT))
        assert len(output) == 1
        assert output[0].content == ""

    def test_tool_call_only(self, sample_tool_call):
        output = split_output(UnifiedMessage(role=MessageRole.ASSISTANT, tool_calls=[sample_tool_call]))
        assert len(output) == 1
        assert not output[0].is_text


class TestExecutiveAgent:
    def test_persisted_history_is_spliced_before_user_message(self):
        client = scripted_client(text_response("Welcome back"))
        agent = create_executive_agent(client)
        state = NetworkState(
            {
                INFERENCE_RECORDS_KEY: [
                    InferenceRecord(user_message_id="1", user_id="u", order=0, role="user", content="hi"),
                    InferenceRecord(
                        user_message_id="1", user_id="u", order=1, role="assistant",
                        tool_call_json=json.dumps({"id": "c1", "name": "get_ideas", "arguments": {}}),
                    ),
                ]
            }
        )

        agent.run("remember me?", state=state)

        messages = client.generate.call_args.kwargs["messages"]
        assert messages[0].role == MessageRole.SYSTEM
        assert messages[1].content == "hi"
        assert messages[2].tool_calls[0].name == "get_ideas"
        assert messages[3].content == "remember me?"
        assert agent.tools == []


class TestCalendarAgent:
    def test_prompt_carries_timezone_and_weekday(self):
        client = scripted_client(text_response("ok"))
        agent = create_calendar_agent(
            client, MagicMock(spec=GoogleCalendarClient), lambda: "tok", "UTC+1 Europe/Berlin"
        )

        agent.run("what's today?")

        system = client.generate.call_args.kwargs["messages"][0].content
        assert "Timezone: UTC+1 Europe/Berlin" in system
        assert "Week starts on Monday" in system
        assert {t.name for t in agent.tools} == {"get_calendars", "get_events", "create_event"}


class TestIdeasAgent:
    def test_result_without_model_call_is_dropped(self, storage, mock_client):
        agent = create_ideas_agent(mock_client, storage, "u")
        agent.before_invoke = lambda invocation: AgentInvocation(
            user_input=invocation.user_input, prompt=invocation.prompt, stop=True
        )

        result = agent.run("list ideas")

        assert result.format() == []

    def test_empty_model_reply_is_kept(self, storage):
        client = scripted_client(text_response(""))
        agent = create_ideas_agent(client, storage, "u")

        result = agent.run("list ideas")

        assert result.raw != ""
        assert [m.content for m in result.format()] == [""]

    def test_stopped_step_is_hidden_from_later_agents(self, storage, mock_client):
        class PausedIdeasAgent(IdeasAgent):
            def before_invoke(self, invocation):
                invocation.stop = True
                return invocation

        ideas = PausedIdeasAgent(name=IDEAS_AGENT_NAME, description="ideas", system="s", client=mock_client)
        executive_client = scripted_client(text_response("Nothing to add."))
        executive = Agent(name="Executive Director agent", description="exec", system="s", client=executive_client)
        router_client = scripted_client(select(IDEAS_AGENT_NAME), select("Executive Director agent"), done())
        network = Network(name="n", agents=[ideas, executive], router=RoutingAgent(router_client))

        state = network.run("list ideas")

        mock_client.generate.assert_not_called()
        assert [r.agent_name for r in state.results] == [IDEAS_AGENT_NAME, "Executive Director agent"]
        executive_messages = executive_client.generate.call_args.kwargs["messages"]
        assert [m.role for m in executive_messages] == [MessageRole.SYSTEM, MessageRole.USER]
        assert [m.content for m in state.format()] == ["Nothing to add."]

    def test_result_with_model_call_uses_default_format(self, storage):
        client = scripted_client(text_response("You have no ideas yet."))
        agent = create_ideas_agent(client, storage, "u")

        result = agent.run("list ideas")

        assert [m.content for m in result.format()] == ["You have no ideas yet."]


@pytest.mark.parametrize("content", ["", None])
def test_empty_model_reply_still_produces_output(content):
    client = scripted_client(text_response(content))
    result = Agent(name="a", description="", system="s", client=client).run("x")
    assert result.output[0].content == ""
    assert result.tool_calls == []


def test_tool_call_ids_preserved():
    tool = ContextRecorderTool()
    call = ToolCall(id="abc", name="record", arguments={})
    client = scripted_client(tool_response("record", call_id=call.id))
    result = Agent(name="a", description="", system="s", client=client, tools=[tool]).run("x")
    assert result.tool_results[0].tool_call.id == "abc"
