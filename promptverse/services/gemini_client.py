from __future__ import annotations

import google.generativeai as genai

from promptverse.services.errors import GeminiConfigurationError, GeminiPromptError


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._configure_api()

    def _configure_api(self) -> None:
        if not self.api_key:
            raise GeminiConfigurationError("API Key is missing. Please configure it in your environment.")
        genai.configure(api_key=self.api_key)

    def generate_content(
        self,
        user_prompt: str,
        system_instruction: str,
        temperature: float = 0.7,
    ) -> str:
        if not system_instruction.strip():
            raise GeminiPromptError("System instruction cannot be empty.")
        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
            generation_config={"temperature": temperature},
        )
        response = model.generate_content(user_prompt)
        return response.text
