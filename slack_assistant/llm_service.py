"""
LLM Service Module

Turns a list of role-tagged messages into a single completion.
Providers:
- Cloud: OpenAI (gpt-4o) - default
- Local: Ollama - free, runs locally
- Cloud: Mistral AI
- Cloud: Google Gemini

Usage:
    llm = LLMService()
    response = llm.chat([
        {"role": "system", "content": "You are a helpful Slack assistant."},
        {"role": "user", "content": "What is our PTO policy?"},
    ])
    print(response.content)
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Dict

from config.settings import get_settings, LLMConfig

# Configure logging
logger = logging.getLogger(__name__)

ChatMessage = Dict[str, str]


@dataclass
class LLMResponse:
    """
    Standardized response from LLM providers.

    Attributes:
        content: The generated text response
        model: Model name used for generation
        usage: Token usage statistics (if available)
        finish_reason: Why generation stopped
    """
    content: str
    model: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None

    def __str__(self) -> str:
        return self.content


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a completion for a conversation.

        Args:
            messages: Ordered list of {"role", "content"} dicts
            temperature: Creativity (0-1, lower = more deterministic)
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse object
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI provider for GPT models.

    Models:
    - gpt-4o: Default
    - gpt-4o-mini: Cheaper, faster
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: Optional[str] = None,
    ):
        self._model = model
        self._api_key = api_key
        self._client = None

        logger.info(f"Initializing OpenAIProvider: model={model}")

    def _get_client(self):
        """Get or create OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            api_key = self._api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError(
                    "OpenAI API key not found. Set OPENAI_API_KEY environment variable."
                )

            self._client = OpenAI(api_key=api_key)
            logger.info("OpenAI client initialized")
        return self._client

    def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        kwargs = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            response = client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"OpenAI generation error: {e}")
            raise

        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content,
            model=response.model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    @property
    def model_name(self) -> str:
        return self._model


class OllamaProvider(BaseLLMProvider):
    """
    Ollama provider for local LLM inference.

    Requirements:
    - Ollama installed: https://ollama.ai
    - Model pulled: ollama pull llama3
    """

    def __init__(
        self,
        model: str = "llama3",
        base_url: str = "http://localhost:11434",
    ):
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._client = None

        logger.info(f"Initializing OllamaProvider: model={model}, url={base_url}")

    def _get_client(self):
        if self._client is None:
            import ollama
            self._client = ollama.Client(host=self._base_url)
            logger.info("Ollama client initialized")
        return self._client

    def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        options = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens

        try:
            response = client.chat(
                model=self._model,
                messages=messages,
                options=options,
            )
        except Exception as e:
            logger.error(f"Ollama generation error: {e}")
            raise

        return LLMResponse(
            content=response["message"]["content"],
            model=self._model,
            usage={
                "prompt_tokens": response.get("prompt_eval_count", 0),
                "completion_tokens": response.get("eval_count", 0),
            },
            finish_reason="stop",
        )

    @property
    def model_name(self) -> str:
        return self._model


class MistralProvider(BaseLLMProvider):
    """Mistral AI cloud provider."""

    def __init__(
        self,
        model: str = "mistral-small-latest",
        api_key: Optional[str] = None,
    ):
        self._model = model
        self._api_key = api_key
        self._client = None

        logger.info(f"Initializing MistralProvider: model={model}")

    def _get_client(self):
        if self._client is None:
            from mistralai import Mistral

            api_key = self._api_key or os.getenv("MISTRAL_API_KEY")
            if not api_key:
                raise ValueError(
                    "Mistral API key not found. Set MISTRAL_API_KEY environment variable."
                )

            self._client = Mistral(api_key=api_key)
            logger.info(f"Mistral client initialized with model: {self._model}")
        return self._client

    def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        client = self._get_client()

        try:
            response = client.chat.complete(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger.error(f"Mistral generation error: {e}")
            raise

        choice = response.choices[0]
        return LLMResponse(
            content=choice.message.content,
            model=self._model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
            finish_reason=choice.finish_reason,
        )

    @property
    def model_name(self) -> str:
        return self._model


class GeminiProvider(BaseLLMProvider):
    """
    Google Gemini provider using the google-genai package.

    Gemini takes system instructions separately from the conversation,
    and calls the assistant role "model".
    """

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: Optional[str] = None,
    ):
        self._model = model
        self._api_key = api_key
        self._client = None

        logger.info(f"Initializing GeminiProvider: model={model}")

    def _get_client(self):
        if self._client is None:
            from google import genai

            api_key = self._api_key or os.getenv("GEMINI_API_KEY")
            if not api_key:
                raise ValueError(
                    "Gemini API key not found. Set GEMINI_API_KEY environment variable."
                )

            self._client = genai.Client(api_key=api_key)
            logger.info(f"Gemini client initialized with model: {self._model}")
        return self._client

    def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        from google.genai import types

        client = self._get_client()

        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        contents = [
            types.Content(
                role="model" if m["role"] == "assistant" else "user",
                parts=[types.Part(text=m["content"])],
            )
            for m in messages
            if m["role"] != "system"
        ]

        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction="\n".join(system_parts) if system_parts else None,
        )
        if max_tokens:
            config.max_output_tokens = max_tokens

        try:
            response = client.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini generation error: {e}")
            raise

        return LLMResponse(
            content=response.text,
            model=self._model,
            finish_reason="stop",
        )

    @property
    def model_name(self) -> str:
        return self._model


class LLMService:
    """
    Main LLM Service with unified interface.

    This is the class that other components should use.
    It handles provider selection based on configuration.

    Example:
        llm = LLMService()                   # provider from config
        llm = LLMService(provider="ollama")  # explicit provider
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[LLMConfig] = None,
    ):
        """
        Initialize the LLM service.

        Args:
            provider: "openai", "ollama", "mistral" or "gemini" (default from config)
            config: Optional LLMConfig instance
        """
        self.config = config or get_settings().llm
        provider = provider or self.config.provider

        if provider == "openai":
            self._provider = OpenAIProvider(
                model=self.config.openai_model,
                api_key=self.config.openai_api_key,
            )
        elif provider == "ollama":
            self._provider = OllamaProvider(
                model=self.config.ollama_model,
                base_url=self.config.ollama_base_url,
            )
        elif provider == "mistral":
            self._provider = MistralProvider(
                model=self.config.mistral_model,
                api_key=self.config.mistral_api_key,
            )
        elif provider == "gemini":
            self._provider = GeminiProvider(
                model=self.config.gemini_model,
                api_key=self.config.gemini_api_key,
            )
        else:
            raise ValueError(f"Unknown LLM provider: {provider}")

        self._provider_name = provider
        logger.info(f"LLMService initialized with {provider} provider")

    def chat(
        self,
        messages: List[ChatMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a completion for a conversation.

        Args:
            messages: Ordered list of {"role", "content"} dicts
            temperature: Defaults to the configured temperature
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse object
        """
        if temperature is None:
            temperature = self.config.temperature

        return self._provider.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    @property
    def provider_name(self) -> str:
        return self._provider_name
