"""Project-level models: global events, settings, and the project document."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - pydantic resolves field types at runtime
from typing import Any, Literal

from pydantic import Field

from questgraph.models.quest import CamelModel, Quest, utcnow

PROJECT_FORMAT_VERSION = "1.0.0"


class EventParameter(CamelModel):
    """One typed parameter of a global event definition."""

    name: str = Field(min_length=1)
    type: Literal["string", "number", "boolean"] = "string"
    default_value: Any = None
    description: str | None = None


class GlobalEvent(CamelModel):
    """A project-wide named event that EVENT nodes reference by id."""

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    parameters: list[EventParameter] | None = None
    used_in_quests: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ProjectSettings(CamelModel):
    """Editor preferences persisted with the project."""

    auto_save: bool = False
    auto_save_interval: int = Field(default=40, ge=1)
    grid_snap: bool = True
    grid_size: int = Field(default=20, ge=1)


class Project(CamelModel):
    """Top-level persisted document. Owns all quests and events."""

    id: str = Field(min_length=1)
    name: str
    version: str = PROJECT_FORMAT_VERSION
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    quests: list[Quest] = Field(default_factory=list)
    events: list[GlobalEvent] = Field(default_factory=list)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)

    def get_quest(self, quest_id: str) -> Quest | None:
        """Return the quest with the given id, or None."""
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None

    def get_event(self, event_id: str) -> GlobalEvent | None:
        """Return the event with the given id, or None."""
        for event in self.events:
            if event.id == event_id:
                return event
        return None
