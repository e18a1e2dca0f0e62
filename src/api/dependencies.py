"""FastAPI dependencies providing config and the assistant service.

The assistant service and the per-thread lock registry live on
``app.state`` and are created on first use, so there is no module-level
client. Tests replace ``get_assistant_service`` (or ``get_config``)
through ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache

from fastapi import Depends, Request

from src.config import AppConfig, load_config
from src.services.assistant_client import AssistantService, OpenAIAssistantService
from src.services.conversation_orchestrator import ConversationOrchestrator
from src.services.thread_session_manager import ThreadLockRegistry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _cached_config() -> AppConfig:
    return load_config()


def get_config() -> AppConfig:
    """Application config, loaded once per process."""
    return _cached_config()


def get_assistant_service(
    request: Request,
    config: AppConfig = Depends(get_config),
) -> AssistantService:
    """Process-wide assistant service held on app.state."""
    service = getattr(request.app.state, "assistant_service", None)
    if service is None:
        service = OpenAIAssistantService(config.openai)
        request.app.state.assistant_service = service
        logger.info("Assistant service initialized")
    return service


def get_lock_registry(request: Request) -> ThreadLockRegistry:
    """Process-wide per-thread lock registry held on app.state."""
    registry = getattr(request.app.state, "thread_locks", None)
    if registry is None:
        registry = ThreadLockRegistry()
        request.app.state.thread_locks = registry
    return registry


def get_orchestrator(
    service: AssistantService = Depends(get_assistant_service),
    config: AppConfig = Depends(get_config),
    registry: ThreadLockRegistry = Depends(get_lock_registry),
) -> ConversationOrchestrator:
    """Orchestrator bound to the injected service and config."""
    return ConversationOrchestrator(service, config, lock_registry=registry)
