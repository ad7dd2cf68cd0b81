"""
leetcord/services/ollama_service.py

One-shot chat against a local Ollama server for the /chat command.
OLLAMA_API_KEY (from the environment or .env) is sent as a bearer token
when set, for servers sitting behind an authenticating proxy.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

import httpx
from dotenv import load_dotenv
from ollama import Client, ResponseError


DEFAULT_MODEL = "llama3.2:3b"


class ChatError(Exception):
    """Raised when the Ollama server cannot answer."""


@dataclass
class ChatResult:
    content: str
    model: str
    elapsed_ms: int


class OllamaService:
    def __init__(self, host: str, model: str = DEFAULT_MODEL, client: Client | None = None):
        """
        host   — Ollama server URL, trailing slash ignored
        model  — default model when chat() is not given one
        """
        load_dotenv()

        self.host = host.rstrip("/")
        self.default_model = model
        if client is None:
            api_key = os.getenv("OLLAMA_API_KEY")
            headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
            client = Client(host=self.host, headers=headers)
        self.client = client

    def chat(self, prompt: str, model: str | None = None) -> ChatResult:
        use_model = model or self.default_model
        logging.debug("OllamaService: sending request to model %s", use_model)

        started = time.monotonic()
        try:
            response = self.client.chat(
                model=use_model,
                messages=[{"role": "user", "content": prompt}],
            )
        except (ResponseError, httpx.HTTPError, ConnectionError) as e:
            logging.warning("OllamaService: request to %s failed: %s", use_model, e)
            raise ChatError(f"Ollama API error: {e}") from e
        elapsed_ms = int((time.monotonic() - started) * 1000)

        logging.info("OllamaService: response from %s in %dms", use_model, elapsed_ms)
        return ChatResult(
            content=response.message.content or "",
            model=getattr(response, "model", None) or use_model,
            elapsed_ms=elapsed_ms,
        )
