from __future__ import annotations

from typing import Any

from commitment.core.providers.api_provider import APIProvider


class GeminiAPIProvider(APIProvider):
    name = "gemini-api"
    tool = "gemini"
    default_endpoint = "https://generativelanguage.googleapis.com/v1beta"
    default_model = "gemini-2.0-flash"

    def headers(self, credential: str) -> dict[str, str]:
        return {"x-goog-api-key": credential, "Content-Type": "application/json"}

    def build_request(self, prompt: str) -> tuple[str, dict[str, Any]]:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }
        return f"{self.endpoint}/models/{self.model}:generateContent", payload

    def extract_text(self, body: Any) -> str:
        return body["candidates"][0]["content"]["parts"][0]["text"]
