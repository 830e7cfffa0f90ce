"""AI Agents package."""

from securefin.agents.ai_agents import (
    AdviceAgent,
    AdviceService,
    FraudRiskAgent,
    FraudRiskService,
)

__all__ = [
    "AdviceAgent",
    "AdviceService",
    "FraudRiskAgent",
    "FraudRiskService",
]
