"""Prompt builder - context window and question to a chat completion request."""

from pydantic import BaseModel, Field

from backend.docchat.models.documents import ContextWindow
from backend.docchat.prompts.templates import PromptSet


class ChatMessage(BaseModel):
    role: str
    content: str


class ModelRequest(BaseModel):
    """Provider-neutral chat completion request."""

    model: str
    messages: list[ChatMessage]
    temperature: float = 0.0
    max_tokens: int = Field(700, ge=1)
    prompt_version: str
    structured: bool = False

    @property
    def system_prompt(self) -> str:
        return self.messages[0].content

    @property
    def user_prompt(self) -> str:
        return self.messages[-1].content


class PromptBuilder:
    """Composes the grounding instructions with the document and the question."""

    def __init__(
        self,
        prompts: PromptSet,
        *,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 700,
    ) -> None:
        self.prompts = prompts
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build(
        self, context: ContextWindow, question: str, structured: bool = False
    ) -> ModelRequest:
        system_prompt = self.prompts.structured if structured else self.prompts.plain
        user_prompt = f"Document:\n{context.text}\n\nQuestion:\n{question}"

        return ModelRequest(
            model=self.model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_prompt),
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            prompt_version=self.prompts.version,
            structured=structured,
        )
