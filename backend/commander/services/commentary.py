import logging

import openai

from commander.services.games.difficulty import Difficulty, parse_difficulty


logger = logging.getLogger(__name__)

NO_SERVICE_FALLBACK = "Great game! The Octopus is speechless."
EMPTY_REPLY_FALLBACK = "The ocean remains silent..."
API_ERROR_FALLBACK = "The Octopus is currently sleeping (API Error)."

PROMPT_TEMPLATE = """
You are a giant, slightly sarcastic, but fair Octopus game master.
A user named "{name}" just finished your reaction game.

Details:
- Result: {result}
- Difficulty: {difficulty}
- Score: {score} points

Write a short, witty, 1-2 sentence comment reacting to their performance.
If they won on Hard, be impressed. If they lost on Easy, be gently mocking.
Use ocean puns if appropriate.
"""


def build_prompt(name: str, score: float, difficulty: Difficulty, won: bool) -> str:
    return PROMPT_TEMPLATE.format(
        name=name,
        result="VICTORY (Completed all rounds)" if won else "DEFEAT (Failed)",
        difficulty=parse_difficulty(difficulty).value,
        score=round(score),
    ).strip()


class CommentaryService:
    """Post-game remark from the octopus, via the OpenAI chat API.

    One attempt, no retries. Never raises: a missing key, an empty answer or
    any client error each map to a fixed fallback line.
    """

    def __init__(self, api_key=None, model='gpt-4o-mini', timeout=10.0, client=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self):
        if self._client is None:
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def summarize(self, name: str, score: float, difficulty, won: bool) -> str:
        if not self.enabled:
            return NO_SERVICE_FALLBACK
        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': build_prompt(name, score, difficulty, won)}],
            )
            text = (response.choices[0].message.content or '').strip()
        except Exception as exc:
            logger.warning(f"[commentary] request failed: {exc}")
            return API_ERROR_FALLBACK
        return text or EMPTY_REPLY_FALLBACK
