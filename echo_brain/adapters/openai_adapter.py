"""
LLM provider adapters for the Echo Brain system.

These adapters implement the LLMProvider interface for different LLM services.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel
import logfire

from echo_brain.interfaces.providers.llm import LLMProvider

# Setup logger for this module
logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_CHAT_MODEL = "gpt-4.1-mini"
DEFAULT_PARSE_MODEL = "gpt-4.1-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_DIMENSIONS = 1536


class OpenAIAdapter(LLMProvider):
    """OpenAI implementation of LLMProvider using the Responses API."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        embedding_model: Optional[str] = None,
        embedding_dimensions: Optional[int] = None,
        logfire_api_key: Optional[str] = None,
    ):
        self.api_key = api_key
        self.client = AsyncOpenAI(api_key=api_key)

        self.logfire = False
        if logfire_api_key:
            try:
                logfire.configure(token=logfire_api_key)
                self.logfire = True
                # Instrument the main client immediately after configuring logfire
                logfire.instrument_openai(self.client)
                logger.info(
                    "Logfire configured and OpenAI client instrumented successfully."
                )
            except Exception as e:
                logger.error(f"Failed to configure Logfire: {e}")
                self.logfire = False

        self.text_model = model or DEFAULT_CHAT_MODEL
        self.parse_model = model or DEFAULT_PARSE_MODEL
        self.embedding_model = embedding_model or DEFAULT_EMBEDDING_MODEL
        self.embedding_dimensions = embedding_dimensions or DEFAULT_EMBEDDING_DIMENSIONS

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str = "",
        model: Optional[str] = None,
    ) -> str:
        """Generate text using the OpenAI Responses API."""
        request_params: Dict[str, Any] = {
            "model": model or self.text_model,
            "input": prompt,
        }
        if system_prompt:
            request_params["instructions"] = system_prompt

        try:
            response = await self.client.responses.create(**request_params)
        except OpenAIError as e:
            logger.error(f"OpenAI API error during text generation: {e}")
            raise

        text = response.output_text or ""
        logger.debug(f"Generated {len(text)} characters with {request_params['model']}")
        return text

    async def parse_structured_output(
        self,
        prompt: str,
        system_prompt: str,
        model_class: Type[T],
        model: Optional[str] = None,
    ) -> T:
        """Generate structured output using OpenAI Responses API with JSON schema."""
        current_parse_model = model or self.parse_model

        try:
            # Use Responses API with text.format for structured output
            response = await self.client.responses.create(
                model=current_parse_model,
                instructions=system_prompt,
                input=prompt,
                text={
                    "format": {
                        "type": "json_schema",
                        "name": model_class.__name__,
                        "strict": True,
                        "schema": model_class.model_json_schema(),
                    }
                },
            )
            return model_class.model_validate_json(response.output_text)

        except Exception as e:
            logger.warning(f"Responses API structured output failed: {e}")

            try:
                # Fallback: Use chat completions with response_format
                logger.info("Falling back to chat completions with JSON schema.")
                fallback_system_prompt = f"""
{system_prompt}

You must respond with valid JSON that matches this schema:
{model_class.model_json_schema()}

Respond with ONLY the JSON object.
"""
                completion = await self.client.chat.completions.create(
                    model=current_parse_model,
                    messages=[
                        {"role": "system", "content": fallback_system_prompt},
                        {"role": "user", "content": prompt},
                    ],
                    response_format={"type": "json_object"},
                )
                json_str = completion.choices[0].message.content
                return model_class.model_validate_json(json_str)

            except Exception as fallback_error:
                logger.exception(
                    f"All structured output methods failed: {fallback_error}"
                )
                raise ValueError(f"Failed to generate structured output: {e}") from e

    async def embed_text(
        self, text: str, model: Optional[str] = None, dimensions: Optional[int] = None
    ) -> List[float]:
        """Generate an embedding for the given text using OpenAI.

        Args:
            text: The text to embed.
            model: The embedding model to use.
            dimensions: Desired output dimensions for the embedding.

        Returns:
            A list of floats representing the embedding vector.
        """
        if not text:
            logger.error("Attempted to embed empty text.")
            raise ValueError("Text cannot be empty")

        embedding_model = model or self.embedding_model
        embedding_dimensions = dimensions or self.embedding_dimensions

        # Replace newlines with spaces as recommended by OpenAI
        text = text.replace("\n", " ")

        try:
            response = await self.client.embeddings.create(
                input=[text], model=embedding_model, dimensions=embedding_dimensions
            )
        except Exception as e:
            logger.exception(f"Error generating embedding: {e}")
            raise

        if response.data and response.data[0].embedding:
            return response.data[0].embedding
        logger.warning("Failed to retrieve embedding from OpenAI response structure.")
        raise ValueError("Failed to retrieve embedding from OpenAI response")
