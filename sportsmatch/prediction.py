import json
from typing import Optional

import httpx
from loguru import logger

from .config import OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL, OPENAI_TIMEOUT_SECONDS
from .errors import PredictionUnavailable
from .models import Prediction, PredictedScore

SYSTEM_PROMPT = "You are a helpful sports analyst. Always return valid JSON."

PROMPT_TEMPLATE = """You are a sports analyst. Predict the outcome of a match between {home} (home) and {away} (away).

Return a JSON object with this exact structure:
{{
  "home_win_probability": number (0-1),
  "away_win_probability": number (0-1),
  "draw_probability": number (0-1),
  "predicted_score": {{ "home": number, "away": number }},
  "confidence": number (0-1)
}}"""

FALLBACK_PREDICTION = Prediction(
    home_win_probability=0.35,
    away_win_probability=0.35,
    draw_probability=0.30,
    predicted_score=PredictedScore(home=1, away=1),
    confidence=0.5,
)


def fallback_prediction() -> Prediction:
    return FALLBACK_PREDICTION.model_copy(deep=True)


def build_prompt(home_team_name: str, away_team_name: str) -> str:
    return PROMPT_TEMPLATE.format(home=home_team_name, away=away_team_name)


def extract_prediction(content: str) -> Prediction:
    """Parse the first JSON object found in free-form model output."""
    start = content.find("{")
    if start == -1:
        raise PredictionUnavailable("No JSON found in response")
    try:
        data, _ = json.JSONDecoder().raw_decode(content[start:])
    except json.JSONDecodeError as e:
        raise PredictionUnavailable(f"Malformed JSON in response: {e}") from e
    return Prediction.model_validate(data)


class PredictionGenerator:
    """Match outcome predictions from an OpenAI-compatible chat endpoint.

    Without an API key, or when the backend fails in any way, the fixed
    heuristic in FALLBACK_PREDICTION is returned instead.
    """

    def __init__(
        self,
        api_key: Optional[str] = OPENAI_API_KEY,
        base_url: str = OPENAI_BASE_URL,
        model: str = OPENAI_MODEL,
        timeout: float = OPENAI_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, home_team_name: str, away_team_name: str) -> Prediction:
        if not self.configured:
            return fallback_prediction()

        try:
            return await self._request(home_team_name, away_team_name)
        except Exception as e:
            logger.warning(f"AI prediction error, using fallback: {e}")
            return fallback_prediction()

    async def _request(self, home_team_name: str, away_team_name: str) -> Prediction:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(home_team_name, away_team_name)},
            ],
            "temperature": 0.7,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions", json=payload, headers=headers
            )
            response.raise_for_status()
            body = response.json()

        choices = body.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise PredictionUnavailable("No response from inference backend")
        return extract_prediction(content)
