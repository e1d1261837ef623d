"""
Conversation Session

In-memory state for one analytics conversation: the selected environment
and schema, the schema's table list, the message history and which pipeline
step is currently running. Nothing here is persisted.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, fields

from ambient.models.conversation import ConversationTurn, Message


@dataclass
class StepFlags:
    """One loading flag per pipeline step."""

    identifying_tables: bool = False
    fetching_columns: bool = False
    generating_sql: bool = False
    executing_sql: bool = False
    evaluating: bool = False
    interpreting: bool = False
    refining: bool = False
    generating_chart: bool = False

    def active(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]

    @property
    def busy(self) -> bool:
        return bool(self.active())


@dataclass
class ConversationSession:
    """
    Conversation state owned by a single client.

    Messages are appended in order and mutated in place as each step of a
    turn completes, so a failure in one turn never touches another.
    """

    env: str | None
    schema: str
    tables: list[str] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    flags: StepFlags = field(default_factory=StepFlags)

    def add_user_message(self, question: str) -> Message:
        message = Message(role="user", content=question)
        self.messages.append(message)
        return message

    def add_assistant_message(self, question: str) -> Message:
        message = Message(role="assistant", content="", user_question=question)
        self.messages.append(message)
        return message

    def get_message(self, message_id: str) -> Message:
        for message in self.messages:
            if message.id == message_id:
                return message
        raise KeyError(f"Unknown message: {message_id}")

    def last_assistant_message(self) -> Message | None:
        for message in reversed(self.messages):
            if message.role == "assistant":
                return message
        return None

    def conversation_context(
        self, before: Message | None = None, preview_rows: int = 3
    ) -> list[ConversationTurn]:
        """Turns preceding ``before`` (or all turns) in prompt-context form."""
        turns = []
        for message in self.messages:
            if before is not None and message.id == before.id:
                break
            turns.append(message.to_turn(preview_rows))
        return turns

    @contextmanager
    def step(self, flag: str) -> Iterator[None]:
        """Raise a step flag for the duration of the block."""
        if not hasattr(self.flags, flag):
            raise AttributeError(f"Unknown step flag: {flag}")
        setattr(self.flags, flag, True)
        try:
            yield
        finally:
            setattr(self.flags, flag, False)
