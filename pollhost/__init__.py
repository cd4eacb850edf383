"""pollhost - MongoDB change-feed bridge that hosts a chat poll with an LLM."""

__version__ = "0.1.0"
