"""Agent network: agents, the routing agent and the routing loop."""

from .agent import Agent, AgentInvocation
from .assistant import AgentClients, create_assistant_network
from .network import INFERENCE_RECORDS_KEY, Network, NetworkState
from .router import DoneTool, RoutingAgent, SelectAgentTool

__all__ = [
    "Agent",
    "AgentClients",
    "AgentInvocation",
    "DoneTool",
    "INFERENCE_RECORDS_KEY",
    "Network",
    "NetworkState",
    "RoutingAgent",
    "SelectAgentTool",
    "create_assistant_network",
]
