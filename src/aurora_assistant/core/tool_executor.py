"""Tool execution logic for agents.

Tool calls requested by the model are looked up by name, their arguments
validated, and the handler invoked. Failures are raised, never folded into
model-visible text.
"""

from ..exceptions import AgentError, ToolExecutionError, ToolNotFoundError
from ..logging import get_logger
from ..tools.base import BaseTool, ToolContext
from ..types import ToolCall, ToolResult

logger = get_logger(__name__)


class ToolExecutor:
    """Dispatches tool calls for one agent."""

    def __init__(self, tools: list[BaseTool], owner: str | None = None):
        """Initialize the tool executor.

        Args:
            tools: Tools available to the agent. Names must be unique.
            owner: Name of the owning agent, used in errors and logs.

        Raises:
            ValueError: If two tools share a name.
        """
        self.owner = owner
        self.tools: dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in self.tools:
                raise ValueError(f"Duplicate tool name '{tool.name}' for agent '{owner}'")
            self.tools[tool.name] = tool

    def execute_single_tool(self, tool_call: ToolCall, context: ToolContext) -> ToolResult:
        """Validate arguments and run one tool call.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolValidationError: If the arguments are invalid.
            ToolExecutionError: If the handler raised.
        """
        tool = self.get_tool(tool_call.name)
        if tool is None:
            raise ToolNotFoundError(tool_call.name, self.owner)

        params = tool.validate(tool_call.arguments)

        logger.info(f"[{self.owner}] executing tool '{tool_call.name}' (ID: {tool_call.id})")
        logger.debug(f"  args: {tool_call.arguments}")

        try:
            content = tool.execute(params, context)
        except AgentError:
            raise
        except Exception as e:
            raise ToolExecutionError(tool_call.name, e) from e

        return ToolResult(tool_call=tool_call, content=content)

    def execute_tool_calls(
        self, tool_calls: list[ToolCall], context: ToolContext
    ) -> list[ToolResult]:
        """Execute tool calls in order and return their results."""
        return [self.execute_single_tool(tc, context) for tc in tool_calls]

    def get_tool(self, name: str) -> BaseTool | None:
        return self.tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self.tools
