"""Custom exception hierarchy for the assistant.

This module defines all custom exceptions used throughout the assistant,
organized into logical categories: routing errors, message errors, client
errors, tool errors and integration errors.
"""


class AgentError(Exception):
    """Base exception for all assistant errors."""


# =============================================================================
# Routing Errors - Fatal problems inside the agent network
# =============================================================================

class RoutingError(AgentError):
    """Base class for routing failures. These abort the run."""


class UnknownAgentError(RoutingError):
    """The routing agent selected an agent that is not in the roster."""

    def __init__(self, agent_name: str, available: list[str] | None = None):
        self.agent_name = agent_name
        self.available = available or []
        message = f"The routing agent requested an agent that doesn't exist: {agent_name}"
        if self.available:
            message += f". Available agents: {', '.join(self.available)}"
        super().__init__(message)


class NetworkContextError(RoutingError):
    """The routing agent was used outside of a network."""

    def __init__(self, message: str = "The routing agent can only be used within a network of agents"):
        super().__init__(message)


# =============================================================================
# Message Errors - Incoming messages the driver refuses to process
# =============================================================================

class MessageRejectedError(AgentError):
    """Incoming message cannot be processed (wrong chat type, unknown user, ...)."""


class CredentialError(AgentError):
    """A required upstream credential is missing."""


# =============================================================================
# Client Errors - Issues with LLM API interactions
# =============================================================================

class ClientError(AgentError):
    """Base class for LLM client errors."""


class AuthenticationError(ClientError):
    """API key is invalid or missing."""


class RateLimitError(ClientError):
    """Rate limit exceeded."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None):
        self.retry_after = retry_after
        if retry_after:
            message = f"{message}. Retry after: {retry_after}s"
        super().__init__(message)


class ProviderUnavailableError(ClientError):
    """Provider API is temporarily unavailable."""


class InvalidResponseError(ClientError):
    """Response from provider could not be parsed."""


# =============================================================================
# Tool Errors - Issues with tool execution
# =============================================================================

class ToolError(AgentError):
    """Base class for tool execution errors."""


class ToolNotFoundError(ToolError):
    """Requested tool does not exist."""

    def __init__(self, tool_name: str, agent_name: str | None = None):
        self.tool_name = tool_name
        self.agent_name = agent_name
        owner = f" for agent '{agent_name}'" if agent_name else ""
        super().__init__(f"Tool not found{owner}: {tool_name}")


class ToolExecutionError(ToolError):
    """Tool execution failed."""

    def __init__(self, tool_name: str, cause: Exception | str):
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"Tool '{tool_name}' execution failed: {cause}")


class ToolValidationError(ToolError):
    """Tool arguments failed validation."""

    def __init__(self, tool_name: str, errors: list[str]):
        self.tool_name = tool_name
        self.errors = errors
        super().__init__(f"Tool '{tool_name}' validation failed: {', '.join(errors)}")


# =============================================================================
# Integration Errors - Google / Telegram HTTP failures
# =============================================================================

class IntegrationError(AgentError):
    """An external HTTP API returned an error."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.status_code = status_code
        prefix = f"{service} error"
        if status_code is not None:
            prefix += f" ({status_code})"
        super().__init__(f"{prefix}: {message}")
