from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ..exceptions import ToolValidationError

if TYPE_CHECKING:
    from ..network.agent import Agent
    from ..network.network import Network, NetworkState


class ToolParams(BaseModel):
    """Base model for tool parameters.

    Unknown keys are rejected so the schema the model sees is also the
    schema arguments are checked against.
    """

    model_config = ConfigDict(extra="forbid")


@dataclass
class ToolContext:
    """Ambient run context handed to every tool handler.

    Attributes:
        network: The network running the current message, if any
        state: The state of the current run, if any
        agent: The agent that requested the tool call
    """
    network: "Network | None" = None
    state: "NetworkState | None" = None
    agent: "Agent | None" = None


class BaseTool(ABC):
    """Abstract base class for all tools.

    Subclasses name themselves, describe themselves for the model, and
    optionally declare a ``params_model``. Arguments coming from the model are
    validated against it before ``execute`` is called.
    """

    params_model: type[ToolParams] | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the tool name."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Return the tool description."""

    @property
    def parameters(self) -> dict[str, Any]:
        """Return the JSON schema for tool parameters."""
        if self.params_model is None:
            return {"type": "object", "properties": {}, "additionalProperties": False}
        return self.params_model.model_json_schema()

    def validate(self, arguments: dict[str, Any]) -> ToolParams | None:
        """Validate raw model arguments.

        Raises:
            ToolValidationError: If the arguments do not match ``params_model``.
        """
        if self.params_model is None:
            if arguments:
                raise ToolValidationError(
                    self.name, [f"unexpected argument '{key}'" for key in arguments]
                )
            return None
        try:
            return self.params_model.model_validate(arguments)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ToolValidationError(self.name, errors) from e

    @abstractmethod
    def execute(self, params: ToolParams | None, context: ToolContext) -> Any:
        """Execute the tool with validated parameters."""

    def to_schema(self) -> dict[str, Any]:
        """Return the tool schema for LLM function calling."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
