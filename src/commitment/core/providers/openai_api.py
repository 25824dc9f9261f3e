from __future__ import annotations

from typing import Any

from commitment.core.providers.api_provider import APIProvider


class OpenAIProvider(APIProvider):
    name = "openai"
    tool = "openai"
    default_endpoint = "https://api.openai.com/v1"
    default_model = "gpt-4o-mini"

    def build_request(self, prompt: str) -> tuple[str, dict[str, Any]]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.2,
        }
        return f"{self.endpoint}/chat/completions", payload

    def extract_text(self, body: Any) -> str:
        return body["choices"][0]["message"]["content"]
