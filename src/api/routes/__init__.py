"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from src.api.routes import analyze, chat, export

__all__ = [
    "analyze",
    "chat",
    "export",
]
