from __future__ import annotations

from typing import Protocol

from openai import OpenAI, OpenAIError

from .errors import GenerationError
from .schema import RetrievalResult

NO_RELEVANT_CONTEXT = "No relevant information found in documents."

PROMPT_TEMPLATE = (
    "Based on the following context, answer the question comprehensively. "
    "If the information is not available in the context, state that clearly.\n\n"
    "Context:\n{context}\n\n"
    "Question: {question}\n\n"
    "Answer:"
)


class Generator(Protocol):
    def generate(self, prompt: str, max_tokens: int, temperature: float) -> str: ...


def build_context(result: RetrievalResult) -> str:
    if result.is_empty:
        return NO_RELEVANT_CONTEXT
    return "\n\n".join(result.texts())


def assemble_prompt(question: str, result: RetrievalResult) -> str:
    """Render ranked chunks and the question into the prompt sent to the model.

    Chunks appear best first so the most relevant context leads the prompt.
    """
    return PROMPT_TEMPLATE.format(context=build_context(result), question=question)


class OpenAIGenerator:
    """Answer generation through the OpenAI chat completions API."""

    def __init__(self, model: str = "gpt-4o", client: OpenAI | None = None):
        self.model = model
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI()
        return self._client

    def generate(self, prompt: str, max_tokens: int = 500, temperature: float = 0.2) -> str:
        """Send one prompt as a single user message and return the reply text.

        Raises:
            GenerationError: If the API call fails or the reply has no content.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as exc:
            raise GenerationError(str(exc)) from exc

        if not response.choices or response.choices[0].message.content is None:
            raise GenerationError(f"Chat model {self.model} returned no content")
        return response.choices[0].message.content
