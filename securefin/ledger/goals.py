"""
Savings goal auto-allocation.

On every income, a fixed share of the amount goes to the first goal (in
list order) that is not yet funded. Policy:
- The rate comes from LedgerSettings.goal_allocation_rate (5% by default)
- Only one goal receives a contribution per income
- Contributions are not capped; a goal may end above its target
"""

from decimal import Decimal
from typing import Iterable, Optional

from securefin.models.ledger import SavingsGoal

DEFAULT_ALLOCATION_RATE = Decimal("0.05")

# Seeded for every new registration
DEFAULT_GOALS = (
    SavingsGoal(id="emergency-fund", name="Emergency Fund", icon="🛡️", target_amount=Decimal("10000")),
    SavingsGoal(id="new-laptop", name="New Laptop", icon="💻", target_amount=Decimal("50000")),
    SavingsGoal(id="vacation", name="Vacation", icon="🏖️", target_amount=Decimal("25000")),
)


def first_unfinished(goals: Iterable[SavingsGoal]) -> Optional[int]:
    for position, goal in enumerate(goals):
        if not goal.is_funded:
            return position
    return None


def auto_allocate(
    goals: Iterable[SavingsGoal],
    income_amount: Decimal,
    rate: Decimal = DEFAULT_ALLOCATION_RATE,
) -> tuple[SavingsGoal, ...]:
    """Return the goals with this income's contribution applied."""
    goals = tuple(goals)
    target = first_unfinished(goals)
    if target is None:
        return goals

    contribution = income_amount * rate
    funded = goals[target].model_copy(
        update={"current_amount": goals[target].current_amount + contribution}
    )
    return goals[:target] + (funded,) + goals[target + 1:]


def default_goals() -> tuple[SavingsGoal, ...]:
    return DEFAULT_GOALS
