"""
Solution generation with a language model.

``SolutionGenerator`` turns question paper text into markdown solutions.
The language model sits behind the narrow ``LanguageModel`` protocol; the
Gemini adapter is the production implementation.
"""

from typing import Optional, Protocol

import google.generativeai as genai

from paper_solver.config import Settings, get_settings
from paper_solver.generation.prompts import PROBE_PROMPT, build_solution_prompt
from paper_solver.utils.errors import (
    EmptyGenerationError,
    GenerationError,
    InvalidInputError,
    MissingConfigurationError,
)
from paper_solver.utils.logging import get_logger, log_performance

logger = get_logger(__name__)


class LanguageModel(Protocol):
    """Capability that completes a prompt. Returns None when no text came back."""

    async def generate(self, prompt: str) -> Optional[str]:
        ...


class GeminiLanguageModel:
    """LanguageModel backed by the Gemini API."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        """
        Initialize the adapter.

        Args:
            api_key: Gemini API key, read once at process start
            model_name: Gemini model to call
        """
        self.api_key = api_key
        self.model_name = model_name

        # Client is configured lazily so a missing key only fails generation
        self._model = None

    def _ensure_model(self) -> None:
        if self._model is None:
            if not self.api_key:
                raise MissingConfigurationError("GEMINI_API_KEY")
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            logger.info(f"Initialized Gemini model: {self.model_name}")

    async def generate(self, prompt: str) -> Optional[str]:
        self._ensure_model()
        response = await self._model.generate_content_async(prompt)

        try:
            return response.text
        except ValueError:
            # Blocked or empty candidates: the call worked but produced no text
            logger.warning(
                "Gemini response had no text",
                extra={"prompt_feedback": str(getattr(response, "prompt_feedback", ""))},
            )
            return None


class SolutionGenerator:
    """Generate step-by-step markdown solutions for a question paper."""

    def __init__(self, model: LanguageModel) -> None:
        self.model = model

    @log_performance
    async def generate(self, text: str) -> str:
        """
        Generate solutions for the given question text.

        Args:
            text: Question paper text

        Returns:
            Markdown solutions

        Raises:
            InvalidInputError: If the text is empty or whitespace
            EmptyGenerationError: If the model returned no text
            GenerationError: If the model call failed
        """
        if not text or not text.strip():
            raise InvalidInputError("Question text is required")

        prompt = build_solution_prompt(text)

        try:
            solution = await self.model.generate(prompt)
        except Exception as e:
            logger.error(f"Error generating solutions: {e}")
            raise GenerationError(f"Failed to generate solutions: {e}")

        if not solution or not solution.strip():
            raise EmptyGenerationError()

        logger.info(
            f"Generated {len(solution)} characters of solutions",
            extra={"question_length": len(text), "solution_length": len(solution)},
        )
        return solution

    async def probe(self) -> bool:
        """Return whether the model answers a minimal prompt. Never raises."""
        try:
            response = await self.model.generate(PROBE_PROMPT)
            return bool(response)
        except Exception as e:
            logger.error(f"API key validation failed: {e}")
            return False


def create_solution_generator(settings: Optional[Settings] = None) -> SolutionGenerator:
    """Create a solution generator backed by Gemini."""
    settings = settings or get_settings()
    return SolutionGenerator(
        GeminiLanguageModel(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
        )
    )
