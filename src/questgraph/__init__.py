"""QuestGraph: graph core for a visual editor of branching quests."""

__version__ = "0.1.0"
