"""Specialist agents of the assistant network.

This module provides factory functions for the executive, calendar and
ideas agents.
"""

from .calendar import CALENDAR_AGENT_NAME, create_calendar_agent
from .executive import EXECUTIVE_AGENT_NAME, ExecutiveAgent, create_executive_agent
from .ideas import IDEAS_AGENT_NAME, IdeasAgent, create_ideas_agent

__all__ = [
    "CALENDAR_AGENT_NAME",
    "EXECUTIVE_AGENT_NAME",
    "ExecutiveAgent",
    "IDEAS_AGENT_NAME",
    "IdeasAgent",
    "create_calendar_agent",
    "create_executive_agent",
    "create_ideas_agent",
]
