"""Test helper utilities."""

from tests.helpers.fake_assistant import FakeAssistantService, make_ref

__all__ = [
    "FakeAssistantService",
    "make_ref",
]
