"""Day tracking API endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from nutrilite.api.models import (
    AddFoodRequest,
    AssistantRequest,
    BodyMetricsRequest,
    UpdateDayRequest,
)
from nutrilite.domain.days import DayRecord, Mode, WorkingDay
from nutrilite.domain.meals import FoodItem, MealSlot
from nutrilite.services.assistant import (
    DEFAULT_QUESTIONS,
    AssistantContext,
    answer_offline,
)
from nutrilite.services.nutrition import (
    build_food_item,
    data_types_for_filter,
    food_details,
    summarize_search_results,
)
from nutrilite.services.stats import (
    HistoryFilter,
    body_metrics,
    build_analytics,
    filter_history,
    macro_targets,
    suggested_calories,
    us_to_metric,
    week_bars,
)
from nutrilite.services.storage import day_to_dict
from nutrilite.services.totals import (
    compute_totals,
    estimate_burned_from_steps,
    goal_progress_percent,
    net_calories,
    remaining_calories,
)
from nutrilite.services.tracker import (
    add_food,
    remove_food,
    select_after_delete,
    update_day,
)
from nutrilite.services.usda_gateway import (
    DEFAULT_PAGE_SIZE,
    FoodQuery,
    GatewayOutcome,
)

if TYPE_CHECKING:
    from nutrilite.containers import AppContainer
    from nutrilite.services.tracker import DayTracker

router = APIRouter(prefix="/api", tags=["tracker"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _resolve_date(tracker: DayTracker, value: str | None) -> str:
    """Return a validated date key, defaulting to today."""
    if not value:
        return tracker.today_key()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date key: {value}",
        ) from exc


def _editable_date(tracker: DayTracker, value: str | None) -> str:
    """Return a date key whose draft may be written, or reject with 409."""
    key = _resolve_date(tracker, value)
    if not tracker.owns_draft(key):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another day has unsaved changes; save or clear it first",
        )
    return key


def _resolve_slot(value: str) -> MealSlot:
    try:
        return MealSlot.from_name(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get("/today")
async def get_today(request: Request, date: str | None = None) -> dict[str, object]:
    """Return the working state for a day, adopting a saved day if needed."""
    tracker = _container(request).tracker
    working = tracker.load(_resolve_date(tracker, date))
    return _working_view(working, tracker)


@router.get("/foods", response_model=None)
async def search_foods(
    request: Request,
    q: str = "",
    data_type: str | None = Query(default=None, alias="type"),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize", gt=0),
    session: str | None = None,
) -> dict[str, object] | JSONResponse:
    """Search foods and return display summaries.

    With a `session`, a newer search from the same session supersedes this
    one, which then answers with no foods and `superseded: true`.
    """
    container = _container(request)
    query = FoodQuery(
        text=q,
        page_size=page_size,
        data_types=tuple(data_types_for_filter(data_type)),
    )
    if session:
        result = await container.food_searches.submit(session, query)
        if result is None:
            return {"foods": [], "superseded": True}
    else:
        result = await container.usda_gateway.run_query(query)
    if result.outcome is not GatewayOutcome.OK:
        return JSONResponse(status_code=result.status_code, content=result.body)
    return {
        "foods": [
            {
                "fdcId": food.fdc_id,
                "description": food.description,
                "brandName": food.brand_name,
                "dataType": food.data_type,
            }
            for food in summarize_search_results(result.body)
        ]
    }


@router.post("/today/items", response_model=None)
async def add_item(
    payload: AddFoodRequest, request: Request, date: str | None = None
) -> dict[str, object] | JSONResponse:
    """Add a food to a meal slot and persist the draft."""
    container = _container(request)
    tracker = container.tracker
    slot = _resolve_slot(payload.meal)
    working = tracker.load(_editable_date(tracker, date))

    if payload.food is not None:
        item = FoodItem(
            description=payload.food.description,
            brand_name=payload.food.brandName or None,
            data_type=payload.food.dataType or None,
            fdc_id=payload.food.fdcId,
            grams=payload.food.grams,
            kcal=payload.food.kcal,
            protein=payload.food.protein,
            carbs=payload.food.carbs,
            fat=payload.food.fat,
            ts=payload.food.ts or datetime.now(tz=UTC).isoformat(),
        )
    elif payload.fdcId is not None and payload.grams is not None:
        result = await container.usda_gateway.get_food(str(payload.fdcId))
        if result.outcome is not GatewayOutcome.OK:
            return JSONResponse(status_code=result.status_code, content=result.body)
        details = food_details(result.body) if isinstance(result.body, dict) else None
        if details is None:
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={"error": "USDA API returned an unexpected food payload"},
            )
        item = build_food_item(details, payload.grams)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide either a food item or an fdcId with grams",
        )

    working = add_food(working, slot, item)
    tracker.persist_draft(working)
    return _working_view(working, tracker)


@router.delete("/today/items/{meal}/{index}")
async def delete_item(
    meal: str, index: int, request: Request, date: str | None = None
) -> dict[str, object]:
    """Remove the item at an index of a meal slot."""
    tracker = _container(request).tracker
    slot = _resolve_slot(meal)
    working = remove_food(tracker.load(_editable_date(tracker, date)), slot, index)
    tracker.persist_draft(working)
    return _working_view(working, tracker)


@router.patch("/today")
async def patch_today(
    payload: UpdateDayRequest, request: Request, date: str | None = None
) -> dict[str, object]:
    """Change water, steps, mode or goal of the working day."""
    tracker = _container(request).tracker
    working = update_day(
        tracker.load(_editable_date(tracker, date)),
        water_cups=payload.waterCups,
        steps=payload.steps,
        mode=payload.mode,
        goal=payload.goal,
    )
    tracker.persist_draft(working)
    return _working_view(working, tracker)


@router.post("/today/save")
async def save_today(request: Request, date: str | None = None) -> dict[str, object]:
    """Merge the working day into its saved record."""
    tracker = _container(request).tracker
    record, working = tracker.save(tracker.load(_resolve_date(tracker, date)))
    return {"day": _day_view(record), "today": _working_view(working, tracker)}


@router.post("/today/clear")
async def clear_today(request: Request, date: str | None = None) -> dict[str, object]:
    """Reset the working day; saved history is kept."""
    tracker = _container(request).tracker
    working = tracker.clear(_resolve_date(tracker, date))
    return _working_view(working, tracker)


@router.get("/days")
async def list_days(request: Request) -> dict[str, object]:
    """Return all saved days, newest first."""
    tracker = _container(request).tracker
    return {"days": [_day_view(record) for record in tracker.list_days()]}


@router.get("/days/export")
async def export_days(request: Request) -> dict[str, object]:
    """Return the raw days map for download."""
    return _container(request).tracker.storage.export_days()


@router.get("/days/{date_key}")
async def get_day(date_key: str, request: Request) -> dict[str, object]:
    """Return one saved day with the week leading up to it."""
    tracker = _container(request).tracker
    key = _resolve_date(tracker, date_key)
    days = tracker.storage.load_days()
    record = days.get(key)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    view = _day_view(record)
    view["weekBars"] = [
        asdict(bar) for bar in week_bars(days, key, fallback_goal=record.goal)
    ]
    return view


@router.delete("/days/{date_key}")
async def delete_day(
    date_key: str, request: Request, selected: str | None = None
) -> dict[str, object]:
    """Delete a saved day and report where the selection moves."""
    tracker = _container(request).tracker
    key = _resolve_date(tracker, date_key)
    days = tracker.storage.load_days()
    if key not in days:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    tracker.delete_day(key)
    next_selected = select_after_delete(
        days, key, selected or key, tracker.today_key()
    )
    return {"deleted": key, "selected": next_selected}


@router.get("/history")
async def history(  # noqa: PLR0913
    request: Request,
    last_days: int = Query(default=14, alias="lastDays", ge=0),
    from_date: str | None = Query(default=None, alias="from"),
    to_date: str | None = Query(default=None, alias="to"),
    meal: str | None = None,
    q: str = "",
) -> dict[str, object]:
    """Filter saved days by range, meal slot and food name."""
    tracker = _container(request).tracker
    days = tracker.storage.load_days()
    filters = HistoryFilter(
        last_days=last_days,
        from_date=_resolve_date(tracker, from_date) if from_date else None,
        to_date=_resolve_date(tracker, to_date) if to_date else None,
        meal=_resolve_slot(meal) if meal and meal.lower() != "all" else None,
        food_query=q,
    )
    keys = filter_history(days, filters, tracker.today_key())
    return {"keys": keys, "days": [_day_view(days[key]) for key in keys]}


@router.get("/analytics")
async def analytics(request: Request) -> dict[str, object]:
    """Return today's figures and the trailing week."""
    tracker = _container(request).tracker
    summary = build_analytics(
        tracker.storage.load_days(),
        tracker.today_key(),
        default_goal=tracker.default_goal,
        kcal_per_step=tracker.kcal_per_step,
    )
    return {
        "todayKey": summary.today_key,
        "hasToday": summary.has_today,
        "goal": summary.goal,
        "mode": summary.mode.value,
        "last7": [asdict(day) for day in summary.last_7_days],
        "avg7": summary.avg_7_days,
        "bestDay": summary.best_day,
        "worstDay": summary.worst_day,
        "hitRate": summary.hit_rate,
        "consumedToday": summary.consumed_today,
        "remainingToday": summary.remaining_today,
        "burnedToday": summary.burned_today,
        "netToday": summary.net_today,
        "macros": summary.macros_today.to_dict(),
    }


@router.post("/body-metrics")
async def compute_body_metrics(payload: BodyMetricsRequest) -> dict[str, object]:
    """Return BMI, a suggested calorie goal and macro targets."""
    if payload.units.lower() == "us":
        height_cm, weight_kg = us_to_metric(
            payload.heightFt or 0, payload.heightIn or 0, payload.weightLb or 0
        )
    else:
        height_cm, weight_kg = payload.heightCm or 0, payload.weightKg or 0
    metrics = body_metrics(height_cm, weight_kg)
    mode = Mode.parse(payload.mode)
    return {
        **asdict(metrics),
        "mode": mode.value,
        "suggestedCalories": suggested_calories(weight_kg, mode, metrics.category),
        "macroTargets": asdict(macro_targets(mode)),
    }


@router.post("/assistant")
async def assistant(payload: AssistantRequest, request: Request) -> dict[str, object]:
    """Answer a question from the offline helper using the working day."""
    tracker = _container(request).tracker
    working = tracker.load(_resolve_date(tracker, payload.date))
    context = AssistantContext(
        goal=working.goal,
        totals=compute_totals(working.meal_log),
        burned=estimate_burned_from_steps(working.steps, tracker.kcal_per_step),
        steps=working.steps,
        mode=working.mode,
    )
    return {
        "text": answer_offline(payload.message, context),
        "questions": list(DEFAULT_QUESTIONS),
    }


def _working_view(working: WorkingDay, tracker: DayTracker) -> dict[str, object]:
    totals = compute_totals(working.meal_log)
    burned = estimate_burned_from_steps(working.steps, tracker.kcal_per_step)
    return {
        "dateKey": working.date_key,
        "mealLog": working.meal_log.to_dict(),
        "waterCups": working.water_cups,
        "steps": working.steps,
        "mode": working.mode.value,
        "goal": working.goal,
        "lastSavedAt": working.last_saved_at,
        "totals": totals.to_dict(),
        "remaining": remaining_calories(working.goal, totals),
        "percent": goal_progress_percent(working.goal, totals),
        "burned": burned,
        "net": net_calories(totals, burned),
        "macroTargets": asdict(macro_targets(working.mode)),
    }


def _day_view(record: DayRecord) -> dict[str, object]:
    view = day_to_dict(record)
    view["remaining"] = remaining_calories(record.goal, record.totals)
    view["net"] = net_calories(record.totals, record.burned)
    return view
