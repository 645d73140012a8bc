"""
External LLM verifier for SkySentinel.

Asks a local OpenAI-compatible chat-completions server (Ollama,
llama.cpp server) whether the keyword verdict describes an active
threat right now or just analytical / recap text.

The verifier only confirms or removes kinds; it never adds new ones
of its own accord. Every failure (timeout, transport error, bad status,
malformed reply) fails open: the keyword verdict is returned unchanged.
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from sky_common.config import Settings
from sky_common.metrics import verifier_failures_total
from sky_common.models import Proximity, ThreatKind

logger = structlog.get_logger()

MAX_PROMPT_TEXT_CHARS = 800

SYSTEM_PROMPT = """You are a Ukrainian air-raid alert classifier.

You receive a Telegram message (Ukrainian or Russian) from an alert channel, together with a keyword-based threat guess produced by an automated filter.

Your job: decide which threats represent an ACTIVE, ONGOING, or IMMINENT threat RIGHT NOW versus analytical / historical / forecast / news / recap text.

Rules:
- Only include a threat if the message describes something happening NOW or about to happen (launch detected, drones in flight, missiles heading to a region, etc.).
- Remove threats that were triggered by analytical context (e.g. "пускові зони" is about launch zones in general, not an active launch).
- If the message is purely informational, a recap, statistics, a forecast, or a calm situation report, return an empty threats list.
- Do NOT add threats that the keyword filter missed; only confirm or remove.
- AllClear ("відбій"/"отбой") should always be confirmed if the message genuinely announces threat cessation.
- When in doubt, confirm the keyword guess.
- Do not categorize potential threats, only factual ones.

Reply ONLY with a JSON object, nothing else:
{"threats": ["Ballistic", ...], "reasoning": ["one sentence why for every choice", ...]}

Valid threat values: Ballistic, Hypersonic, CruiseMissile, GuidedBomb, Missile, Shahed, ReconDrone, Aircraft, AllClear
Empty list = not an active alert: {"threats": [], "reasoning": ["..."]}
"""


# ── wire models ──


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float = 0.0
    max_tokens: int = 150
    response_format: dict[str, str] = Field(default_factory=lambda: {"type": "json_object"})


class _ChoiceMessage(BaseModel):
    content: str


class _Choice(BaseModel):
    message: _ChoiceMessage


class ChatResponse(BaseModel):
    choices: list[_Choice] = Field(default_factory=list)


class Verdict(BaseModel):
    """JSON object the model is instructed to reply with."""

    threats: list[str]
    reasoning: list[str] = Field(default_factory=list)


# ── verifier ──


def build_user_prompt(
    text: str,
    threats: list[ThreatKind],
    proximity: Proximity,
    nationwide: bool,
) -> str:
    """Render the per-message user prompt."""
    names = ", ".join(kind.variant_name for kind in threats)
    truncated = text[:MAX_PROMPT_TEXT_CHARS]
    return (
        f"Message from channel:\n```\n{truncated}\n```\n"
        f"Keyword filter detected: [{names}]\n"
        f"Proximity: {proximity.name.title()}\n"
        f"Nationwide: {str(nationwide).lower()}\n\n"
        "Classify:"
    )


class LlmVerifier:
    """Fail-open second opinion on keyword verdicts.

    Args:
        endpoint: Base URL of the OpenAI-compatible server.
        model: Model name sent with each request.
        enabled: When ``False``, :meth:`verify` returns its input unchanged.
        timeout_s: Hard timeout for one request.
    """

    def __init__(
        self,
        endpoint: str,
        model: str,
        *,
        enabled: bool = False,
        timeout_s: float = 3.0,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.enabled = enabled
        self.timeout_s = timeout_s
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> LlmVerifier:
        return cls(
            settings.verifier_endpoint,
            settings.verifier_model,
            enabled=settings.verifier_enabled,
            timeout_s=settings.verifier_timeout_s,
        )

    @property
    def url(self) -> str:
        return f"{self.endpoint}/v1/chat/completions"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return (and lazily create) the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    def _fail_open(self, reason: str, threats: list[ThreatKind], **context: object) -> list[ThreatKind]:
        verifier_failures_total.labels(reason=reason).inc()
        logger.warning("verifier_failed_open", reason=reason, **context)
        return list(threats)

    async def verify(
        self,
        text: str,
        threats: list[ThreatKind],
        proximity: Proximity,
        nationwide: bool,
    ) -> list[ThreatKind]:
        """Confirm or prune *threats* for *text*.

        Returns:
            The verified kinds. An empty list means the message is not an
            active alert. Any failure returns *threats* unchanged.
        """
        if not self.enabled:
            return list(threats)

        request = ChatRequest(
            model=self.model,
            messages=[
                ChatMessage(role="system", content=SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=build_user_prompt(text, threats, proximity, nationwide),
                ),
            ],
        )

        try:
            client = await self._get_client()
            resp = await client.post(self.url, json=request.model_dump(), timeout=self.timeout_s)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            return self._fail_open("timeout", threats, error=str(exc))
        except httpx.HTTPStatusError as exc:
            return self._fail_open("status", threats, status=exc.response.status_code)
        except httpx.TransportError as exc:
            return self._fail_open("transport", threats, error=str(exc))
        except httpx.HTTPError as exc:
            return self._fail_open("http", threats, error=str(exc))

        try:
            body = ChatResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            return self._fail_open("bad_response", threats, error=str(exc))
        if not body.choices:
            return self._fail_open("no_choices", threats)

        content = body.choices[0].message.content
        try:
            verdict = Verdict.model_validate_json(content)
        except ValidationError as exc:
            return self._fail_open("bad_verdict", threats, error=str(exc), raw=content)

        logger.debug("verifier_verdict", threats=verdict.threats, reasoning=verdict.reasoning)

        if not verdict.threats:
            logger.info("verifier_not_active", keyword_threats=[k.value for k in threats])
            return []

        parsed = (ThreatKind.from_variant_name(name) for name in verdict.threats)
        verified = list(dict.fromkeys(kind for kind in parsed if kind is not None))
        if not verified:
            return self._fail_open("unknown_threats", threats, names=verdict.threats)
        return verified

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
