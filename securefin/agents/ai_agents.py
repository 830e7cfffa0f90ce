"""
AI Collaborators for SecureFin

DESIGN DECISION: The ledger core treats AI as an opaque external service
with a narrow contract:

1. ADVICE SERVICE:
   - IN: transaction history, current balance, locale tag
   - OUT: free-form advice text
   - Failure: caller substitutes a static message; never fatal

2. FRAUD-RISK SERVICE:
   - IN: one candidate transfer
   - OUT: RiskAssessment {risk_level, reason}
   - Failure: RiskLevel.UNKNOWN, which the processor treats as
     "needs manual confirmation"

CRITICAL BOUNDARIES:
- Agents NEVER touch the ledger, accounts or goals
- Agents NEVER block a transaction on their own; the processor decides
- The LLM is an ADVISOR, not a GATEKEEPER
"""

import json
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional, Sequence

import google.generativeai as genai
from tenacity import retry, stop_after_attempt, wait_exponential

from securefin.config import get_settings
from securefin.models.ledger import (
    RiskAssessment,
    RiskLevel,
    Transaction,
    TransactionRequest,
)

LANGUAGE_NAMES = {
    "en": "English",
    "hi": "Hindi",
    "ta": "Tamil",
    "te": "Telugu",
    "bn": "Bengali",
    "mr": "Marathi",
}


class AdviceService(ABC):
    """Contract for the advice collaborator."""

    @abstractmethod
    async def get_advice(
        self,
        transactions: Sequence[Transaction],
        balance: Decimal,
        locale: str,
    ) -> str:
        pass


class FraudRiskService(ABC):
    """Contract for the fraud-risk collaborator."""

    @abstractmethod
    async def check_risk(self, transaction: TransactionRequest) -> RiskAssessment:
        pass


def _extract_json(text: str) -> Optional[dict]:
    """Find the first JSON object in an LLM response."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class _GeminiAgent:
    """Shared Gemini model setup."""

    max_output_tokens = 512

    def __init__(self, model: Any = None):
        if model is not None:
            self._model = model
        else:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": min(self.max_output_tokens, settings.max_tokens),
            }
        )


class AdviceAgent(_GeminiAgent, AdviceService):
    """
    Generates short personal-finance advice from the transaction history.

    Transient API errors are retried twice; anything else propagates so the
    caller can fall back to its static message.
    """

    max_output_tokens = 1024
    history_limit = 30

    def build_prompt(
        self,
        transactions: Sequence[Transaction],
        balance: Decimal,
        locale: str,
    ) -> str:
        recent = list(transactions)[-self.history_limit:]
        lines = [
            f"- {t.timestamp.date()} {t.type.value} {t.category.value} "
            f"{t.amount} ({t.description})"
            for t in recent
        ]
        history = "\n".join(lines) or "No transactions yet"
        language = LANGUAGE_NAMES.get(locale.split("-")[0].lower(), "English")

        return f"""You are a friendly financial advisor for a student or young professional in India.

Current balance: ₹{balance}

Recent transactions:
{history}

Give 3 short, practical tips based ONLY on the data above.
- Point out the biggest spending category if there is one
- Suggest one concrete saving action
- Keep it under 120 words
- Respond in {language}"""

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        reraise=True,
    )
    async def _generate(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return response.text.strip()

    async def get_advice(
        self,
        transactions: Sequence[Transaction],
        balance: Decimal,
        locale: str,
    ) -> str:
        prompt = self.build_prompt(transactions, balance, locale)
        return await self._generate(prompt)


class FraudRiskAgent(_GeminiAgent, FraudRiskService):
    """
    Labels a candidate transfer as low / medium / high risk.

    NOTE: This agent is called once per transfer. It does not retry; a
    failed call yields RiskLevel.UNKNOWN.
    """

    max_output_tokens = 256

    def build_prompt(self, transaction: TransactionRequest) -> str:
        return f"""You are a fraud-detection assistant for a P2P payments app.

Analyze this transaction:
- Type: {transaction.type.value}
- Amount: ₹{transaction.amount}
- Category: {transaction.category.value}
- Description: {transaction.description or "none"}
- Receiver: {transaction.receiver or "none"}

Respond with ONLY a JSON object in this exact format:
{{"riskLevel": "Low" | "Medium" | "High", "reason": "brief explanation"}}"""

    def parse_response(self, text: str) -> RiskAssessment:
        data = _extract_json(text)
        if data is None:
            return RiskAssessment(
                risk_level=RiskLevel.UNKNOWN,
                reason="Risk check returned an unreadable response",
            )

        raw_level = str(data.get("riskLevel") or data.get("risk_level") or "").lower()
        try:
            level = RiskLevel(raw_level)
        except ValueError:
            level = RiskLevel.UNKNOWN

        return RiskAssessment(
            risk_level=level,
            reason=str(data.get("reason", "")),
        )

    async def check_risk(self, transaction: TransactionRequest) -> RiskAssessment:
        try:
            response = await self._model.generate_content_async(
                self.build_prompt(transaction)
            )
            return self.parse_response(response.text.strip())
        except Exception as e:
            return RiskAssessment(
                risk_level=RiskLevel.UNKNOWN,
                reason=f"Risk check unavailable: {e}",
            )
