"""Tests for the offline helper."""

from nutrilite.domain.days import Mode
from nutrilite.domain.meals import Totals
from nutrilite.services.assistant import AssistantContext, answer_offline

CONTEXT = AssistantContext(
    goal=2000,
    totals=Totals(calories=1250, protein=80.4, carbs=120.6, fat=40),
    burned=200,
    steps=5000,
    mode=Mode.CUT,
)


def test_calories_left() -> None:
    answer = answer_offline("How many calories left today?", CONTEXT)

    assert "1250 kcal out of 2000 kcal" in answer
    assert "Remaining: 750 kcal." in answer


def test_calories_eaten_includes_net_when_burned() -> None:
    answer = answer_offline("How many calories did I eat?", CONTEXT)

    assert "Total consumed: 1250 kcal." in answer
    assert "Net: 1050 kcal." in answer
    plain = answer_offline("calories did i eat", AssistantContext())
    assert "Net" not in plain


def test_macros_and_mode() -> None:
    assert "- Carbs: 121 g" in answer_offline("Show my macros today", CONTEXT)
    assert "currently on Cut" in answer_offline("What does bulk mean?", CONTEXT)


def test_tips_and_fallback() -> None:
    assert "protein boost" in answer_offline("How can I increase protein?", CONTEXT)
    assert "snack" in answer_offline("Give me a healthy snack idea", CONTEXT)
    assert "liters" in answer_offline("How much water should I drink?", CONTEXT)
    assert "Steps today: 5000." in answer_offline("my steps?", CONTEXT)
    assert answer_offline("tell me a joke", CONTEXT).startswith("Try asking:")


def test_macros_round_halves_up() -> None:
    context = AssistantContext(totals=Totals(protein=80.5, carbs=2.5, fat=0.5))

    answer = answer_offline("macros", context)

    assert "- Protein: 81 g" in answer
    assert "- Carbs: 3 g" in answer
    assert "- Fat: 1 g" in answer
