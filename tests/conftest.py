"""
Shared fixtures for the AI Schoolmate tests.

The environment is configured before any project module is imported so
that settings pick up an in-memory database and a test auth token.
"""
import os
import sys

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["AUTH_SECRET_KEY"] = "test-token"
os.environ["SUBJECT_MISMATCH_POLICY"] = "override"

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from langchain_core.messages import AIMessage

from database import Base, SessionLocal, engine, init_db


def tool_call(name, args=None, call_id="call_1"):
    """Tool call entry as carried by an AIMessage."""
    return {"name": name, "args": args or {}, "id": call_id, "type": "tool_call"}


class FakeEngine:
    """
    Scripted stand-in for the reasoning engine.

    Args:
        intent: AIMessage (or exception) returned for the tool-selection call
        completion: Text (or exception) returned by complete()
        advice: Text (or exception) returned by advise()
    """

    def __init__(self, intent=None, completion="Synthesized answer.", advice=""):
        self.intent = intent if intent is not None else AIMessage(content="")
        self.completion = completion
        self.advice = advice
        self.intent_calls = []
        self.complete_calls = []
        self.advise_calls = []

    def request_invocations(self, instruction, tools):
        self.intent_calls.append((instruction, tools))
        if isinstance(self.intent, Exception):
            raise self.intent
        return self.intent

    def complete(self, instruction):
        self.complete_calls.append(instruction)
        if isinstance(self.completion, Exception):
            raise self.completion
        return self.completion

    def advise(self, instruction):
        self.advise_calls.append(instruction)
        if isinstance(self.advice, Exception):
            raise self.advice
        return self.advice


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def db():
    """Fresh database session; all rows are removed afterwards."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())
