"""Prompt construction utilities.

This module resolves agent system prompts (static or generated per run) and
creates unified messages for the different roles.
"""

from typing import TYPE_CHECKING, Callable, Union

from ..types import MessageRole, UnifiedMessage

if TYPE_CHECKING:
    from ..network.network import Network

SystemPrompt = Union[str, Callable[["Network | None"], str]]


class PromptBuilder:
    """Constructs prompts for an agent.

    The system prompt may be a plain string or a callable receiving the
    active network, evaluated on every run so it can describe live state
    such as the agent roster.
    """

    def __init__(self, system: SystemPrompt):
        self.system = system

    def resolve_system_prompt(self, network: "Network | None") -> str:
        if callable(self.system):
            return self.system(network)
        return self.system

    def build_system_message(self, content: str) -> UnifiedMessage:
        return UnifiedMessage(role=MessageRole.SYSTEM, content=content)

    def build_user_message(self, content: str) -> UnifiedMessage:
        return UnifiedMessage(role=MessageRole.USER, content=content)

    def build_prompt(self, user_input: str, network: "Network | None") -> list[UnifiedMessage]:
        """Default prompt: the system prompt followed by the user's input."""
        return [
            self.build_system_message(self.resolve_system_prompt(network)),
            self.build_user_message(user_input),
        ]
