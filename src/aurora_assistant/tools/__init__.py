"""Tools available to the assistant's agents."""

from .base import BaseTool, ToolContext, ToolParams
from .calendar import (
    CreateEventTool,
    GetCalendarsTool,
    GetEventsTool,
    TokenProvider,
    create_calendar_tools,
)
from .ideas import (
    CreateIdeaTool,
    GetFoldersTool,
    GetIdeaByIdTool,
    GetIdeasTool,
    create_ideas_tools,
)

__all__ = [
    "BaseTool",
    "CreateEventTool",
    "CreateIdeaTool",
    "GetCalendarsTool",
    "GetEventsTool",
    "GetFoldersTool",
    "GetIdeaByIdTool",
    "GetIdeasTool",
    "TokenProvider",
    "ToolContext",
    "ToolParams",
    "create_calendar_tools",
    "create_ideas_tools",
]
