"""Rule-based offline helper answering questions about today's log."""

from dataclasses import dataclass, field

from nutrilite.domain.days import Mode
from nutrilite.domain.meals import Totals
from nutrilite.services.totals import (
    net_calories,
    remaining_calories,
    round_half_up,
)

DEFAULT_QUESTIONS = (
    "How many calories left today?",
    "Show my macros today",
    "How can I increase protein?",
    "Give me a healthy snack idea",
    "How many calories did I eat?",
    "What does Maintain/Cut/Bulk mean?",
    "How much water should I drink?",
)


@dataclass(frozen=True)
class AssistantContext:
    """Figures the helper can quote back."""

    goal: int = 2000
    totals: Totals = field(default_factory=Totals)
    burned: int = 0
    steps: int = 0
    mode: Mode = Mode.MAINTAIN


def answer_offline(question: str, context: AssistantContext) -> str:
    """Answer by keyword, falling back to a list of suggestions."""
    q = question.lower()
    cal = context.totals.calories

    if "calories left" in q or "remaining" in q:
        remaining = remaining_calories(context.goal, context.totals)
        return (
            f"You've consumed {_kcal(cal)} out of {_kcal(context.goal)}.\n"
            f"Remaining: {_kcal(remaining)}."
        )

    if "calories did i eat" in q:
        text = f"Total consumed: {_kcal(cal)}."
        if context.burned:
            net = net_calories(context.totals, context.burned)
            text += (
                f"\nEstimated burned: {_kcal(context.burned)}.\nNet: {_kcal(net)}."
            )
        return text

    if "macro" in q:
        return (
            "Macros so far:\n"
            f"- Protein: {_whole(context.totals.protein)} g\n"
            f"- Carbs: {_whole(context.totals.carbs)} g\n"
            f"- Fat: {_whole(context.totals.fat)} g\n"
            f"Calories: {_kcal(cal)}."
        )

    if "increase protein" in q or "more protein" in q:
        return (
            "Easy protein boost ideas:\n"
            "- Greek yogurt / cottage cheese\n"
            "- Eggs or egg whites\n"
            "- Chicken/turkey/lean fish\n"
            "- Lentils/chickpeas\n"
            "- Protein shake (if needed)\n"
            "Aim for ~25-35g protein per meal."
        )

    if "snack" in q:
        return (
            "Healthy snack ideas:\n"
            "- Apple + peanut butter\n"
            "- Greek yogurt + berries\n"
            "- Hummus + carrots\n"
            "- Nuts + a fruit\n"
            "- Boiled eggs\n"
            "Pick based on your goal (Cut: more protein/fiber, Bulk: add carbs too)."
        )

    if "maintain" in q or "cut" in q or "bulk" in q:
        return (
            f"You're currently on {context.mode.value}.\n"
            "- Cut = calorie deficit (lose fat)\n"
            "- Maintain = around maintenance calories (stable)\n"
            "- Bulk = calorie surplus (gain muscle/weight)\n"
            "Protein stays high in all modes."
        )

    if "water" in q:
        return (
            "Water tip:\n"
            "A simple target is ~2-3 liters/day (more if active).\n"
            "Try 8-12 cups/day as a starting point."
        )

    if "steps" in q:
        return (
            f"Steps today: {context.steps}.\n"
            f"Estimated burned (rough): {_kcal(context.burned)}.\n"
            "More accurate burn needs age/sex/intensity."
        )

    return (
        "Try asking:\n"
        '- "How many calories left?"\n'
        '- "Show my macros"\n'
        '- "Healthy snack idea"\n'
        '- "How to increase protein?"'
    )


def _kcal(value: float) -> str:
    return f"{_whole(value)} kcal"


def _whole(value: float) -> int:
    return int(round_half_up(value))
