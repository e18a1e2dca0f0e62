"""Service layer for Wiring Analyst.

Provides the assistant service adapter, thread resolution, document
ingestion, run driving and terminal table extraction/export.
"""

from src.services.assistant_client import AssistantService, OpenAIAssistantService
from src.services.conversation_orchestrator import (
    AnalyzeResult,
    ChatResult,
    ConversationOrchestrator,
)
from src.services.table_extractor import extract_table

__all__ = [
    "AssistantService",
    "OpenAIAssistantService",
    "ConversationOrchestrator",
    "AnalyzeResult",
    "ChatResult",
    "extract_table",
]
