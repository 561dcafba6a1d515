"""Model client interface shared by every agent.

Agents reach their model only through ``BaseLLMClient.generate``. A client
is bound to one agent role: it carries that role's model name and sampling
options, and translates unified messages and tools to its API and back.
"""

import functools
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal, TypeVar

from ..exceptions import ProviderUnavailableError, RateLimitError
from ..logging import get_logger
from ..types import UnifiedMessage, UnifiedResponse

if TYPE_CHECKING:
    from ..tools.base import BaseTool

logger = get_logger(__name__)

T = TypeVar("T")

# "auto" lets the model answer in text, "required" forces a tool call
ToolChoice = Literal["auto", "required", "none"]

TRANSIENT_ERRORS = (RateLimitError, ProviderUnavailableError)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule for transient model API failures.

    Attributes:
        attempts: Total calls made before the last error is raised
        base_delay: Upper bound of the first wait, doubled on every attempt
        max_delay: Cap on a single wait
    """
    attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 30.0

    def wait_for(self, attempt: int, error: Exception) -> float:
        """Seconds to sleep after failed ``attempt`` (0-based)."""
        retry_after = getattr(error, "retry_after", None)
        if retry_after:
            return min(retry_after, self.max_delay)
        return random.uniform(0, min(self.max_delay, self.base_delay * 2 ** attempt))


def retry_transient(policy: RetryPolicy = RetryPolicy()) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a model call on rate limits and provider outages.

    Other errors, including authentication failures and bad requests, are
    raised on the first occurrence.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    attempt += 1
                    if attempt >= policy.attempts:
                        logger.warning(f"giving up on {func.__name__} after {attempt} attempts: {e}")
                        raise
                    wait = policy.wait_for(attempt - 1, e)
                    logger.info(f"{func.__name__} failed ({e}), retrying in {wait:.1f}s")
                    time.sleep(wait)

        return wrapper
    return decorator


class BaseLLMClient(ABC):
    """A chat model bound to one agent role.

    Attributes:
        model: Model name sent with every request
        client_config: Request options for this role (temperature, ...)
    """

    model: str = ""

    def __init__(self, model: str, client_config: dict[str, Any] | None = None):
        self.model = model
        self.client_config = dict(client_config or {})

    @abstractmethod
    def generate(
        self,
        messages: list[UnifiedMessage],
        tools: list["BaseTool"] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> UnifiedResponse:
        """Run one chat completion.

        Args:
            messages: Full prompt, system message first
            tools: Tools the model may call
            tool_choice: "required" makes the model answer with a tool call

        Raises:
            ClientError: Any failure talking to the provider.
        """
