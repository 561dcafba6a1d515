"""Idea and folder tools for the ideas agent.

All queries are scoped to the user the tools were built for.
"""

from dataclasses import asdict
from typing import Any

from pydantic import Field

from ..storage import Idea, Storage
from .base import BaseTool, ToolContext, ToolParams


class IdeasTool(BaseTool):
    def __init__(self, storage: Storage, user_id: str):
        self.storage = storage
        self.user_id = user_id


class GetFoldersTool(IdeasTool):
    @property
    def name(self) -> str:
        return "get_folders"

    @property
    def description(self) -> str:
        return "Returns all of the user's folders"

    def execute(self, params: None, context: ToolContext) -> list[dict[str, Any]]:
        return [
            {
                "id": folder.id,
                "name": folder.name,
                "created_at": folder.created_at,
                "updated_at": folder.updated_at,
            }
            for folder in self.storage.list_folders(self.user_id)
        ]


class GetIdeasTool(IdeasTool):
    @property
    def name(self) -> str:
        return "get_ideas"

    @property
    def description(self) -> str:
        return "Returns all of the user's ideas"

    def execute(self, params: None, context: ToolContext) -> list[dict[str, Any]]:
        return self.storage.list_ideas(self.user_id)


class GetIdeaByIdParams(ToolParams):
    id: str = Field(description="The ID of the idea to retrieve")


class GetIdeaByIdTool(IdeasTool):
    params_model = GetIdeaByIdParams

    @property
    def name(self) -> str:
        return "get_idea_by_id"

    @property
    def description(self) -> str:
        return "Returns a single idea by its ID"

    def execute(self, params: GetIdeaByIdParams, context: ToolContext) -> dict[str, Any] | None:
        return self.storage.get_idea(self.user_id, params.id)


class CreateIdeaParams(ToolParams):
    name: str = Field(description="The name of the idea")
    description: str | None = Field(default=None, description="A detailed description of the idea")
    folder_id: str | None = Field(
        default=None, description="The ID of the folder to assign the idea to"
    )


class CreateIdeaTool(IdeasTool):
    params_model = CreateIdeaParams

    @property
    def name(self) -> str:
        return "create_idea"

    @property
    def description(self) -> str:
        return "Creates a new idea"

    def execute(self, params: CreateIdeaParams, context: ToolContext) -> dict[str, Any]:
        if params.folder_id and self.storage.get_folder(self.user_id, params.folder_id) is None:
            return {"error": "Folder not found"}

        idea = self.storage.create_idea(
            Idea(
                user_id=self.user_id,
                name=params.name,
                description=params.description,
                folder_id=params.folder_id or None,
            )
        )
        return asdict(idea)


def create_ideas_tools(storage: Storage, user_id: str) -> list[BaseTool]:
    return [
        GetFoldersTool(storage, user_id),
        GetIdeasTool(storage, user_id),
        GetIdeaByIdTool(storage, user_id),
        CreateIdeaTool(storage, user_id),
    ]
