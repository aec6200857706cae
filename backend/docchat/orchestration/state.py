"""Query pipeline state."""

import uuid
from dataclasses import dataclass, field
from typing import Literal

from backend.docchat.llm.client import Completion
from backend.docchat.models.documents import ContextWindow, StoredDocument
from backend.docchat.prompts.builder import ModelRequest

PipelineStep = Literal[
    "authenticating",
    "resolving_document",
    "assembling_context",
    "invoking",
    "replying",
]

# Terminal outcomes. Everything except "unauthenticated" ends in a 200 reply.
QueryOutcome = Literal[
    "pending",
    "replied",
    "unauthenticated",
    "no_document",
    "source_missing",
    "empty_text",
    "inference_fallback",
]


@dataclass
class QueryState:
    """State for one chat request moving through the pipeline."""

    question: str
    structured: bool = False
    request_id: uuid.UUID = field(default_factory=uuid.uuid4)
    user_id: uuid.UUID | None = None
    outcome: QueryOutcome = "pending"
    trace: list[PipelineStep] = field(default_factory=list)

    # Filled in as the request advances
    document: StoredDocument | None = None
    context: ContextWindow | None = None
    model_request: ModelRequest | None = None
    completion: Completion | None = None
    reply: str | None = None
    failure_reason: str | None = None

    def enter(self, step: PipelineStep) -> None:
        self.trace.append(step)

    def finish(self, outcome: QueryOutcome, reply: str | None = None) -> None:
        self.outcome = outcome
        if reply is not None:
            self.reply = reply
