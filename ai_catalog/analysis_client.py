"""
Content-analysis client backed by Google Gemini.

A client without an API key is disabled: every call raises AnalysisError so
callers fall back to their degraded values.
"""

from typing import Optional

import google.generativeai as genai

from .config import DEFAULT_GEMINI_MODEL, Settings
from .errors import AnalysisError


class AnalysisClient:
    """Thin wrapper around the Gemini SDK with a request-level timeout."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_GEMINI_MODEL,
        temperature: float = 0.1,
        timeout: float = 60,
    ):
        self._api_key = api_key or ''
        self._temperature = temperature
        self._timeout = timeout
        self._model = None
        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._model = genai.GenerativeModel(model)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'AnalysisClient':
        return cls(
            settings.gemini_api_key,
            model=settings.gemini_model,
            temperature=settings.gemini_temperature,
            timeout=settings.analysis_timeout,
        )

    @property
    def enabled(self) -> bool:
        return self._model is not None

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the stripped response text.

        Raises:
            AnalysisError: if the client is disabled or the request fails
        """
        if not self.enabled:
            raise AnalysisError('GEMINI_API_KEY not configured')

        try:
            response = self._model.generate_content(
                prompt,
                generation_config={'temperature': self._temperature},
                request_options={'timeout': self._timeout},
            )
            text = response.text
        except Exception as e:
            raise AnalysisError(f'Gemini request failed: {e}') from e

        return (text or '').strip()
