import json

import pytest

from backend.plan import (
    Counted,
    PlannedExercise,
    Timed,
    WorkoutPlan,
    load_plan,
    plan_from_api_workout,
    plan_from_dict,
    single_exercise_plan,
)
from core import DEFAULT_REST_DURATION, DEFAULT_SETS_PER_EXERCISE, DEFAULT_TIMED_DURATION


def test_plan_from_dict():
    plan = plan_from_dict(
        {
            "name": "Core",
            "exercises": [
                {
                    "exercise": {"name": "Hollow Hold", "calories": 3},
                    "mode": {"kind": "timed", "seconds": 20},
                    "sets": 3,
                    "rest_seconds": 15,
                },
                {
                    "exercise": {"name": "Sit-up"},
                    "mode": {"kind": "counted", "reps": 12},
                },
            ],
        }
    )
    assert plan.name == "Core"
    assert len(plan) == 2
    assert plan[0].mode == Timed(20)
    assert plan[0].is_timed
    assert plan[0].calories_per_set == 3
    assert plan[1].mode == Counted(12)
    assert plan[1].sets == DEFAULT_SETS_PER_EXERCISE
    assert plan[1].rest_seconds == DEFAULT_REST_DURATION
    assert plan.total_units == 3 + DEFAULT_SETS_PER_EXERCISE
    assert plan.estimated_calories == 9
    assert plan.save_history


def test_plan_rejects_bad_input():
    with pytest.raises(ValueError):
        plan_from_dict({"exercises": []})
    with pytest.raises(ValueError):
        plan_from_dict(
            {"exercises": [{"exercise": {}, "mode": {"kind": "swim", "seconds": 3}}]}
        )
    with pytest.raises(ValueError):
        PlannedExercise(exercise={}, mode=Counted(5), sets=0)


def test_total_calories_override():
    plan = WorkoutPlan(
        exercises=(
            PlannedExercise(exercise={}, mode=Counted(5), sets=2, calories_per_set=10),
        ),
        total_calories=42,
    )
    assert plan.estimated_calories == 42


def test_plan_from_api_workout():
    plan = plan_from_api_workout(
        {
            "workoutName": "Treino do dia",
            "totalCalories": 120,
            "exercises": [
                {
                    "exercise": {
                        "nome": "Prancha",
                        "tipo": "timer",
                        "tempo_estimado": 45,
                        "calorias_estimadas": 4,
                    },
                    "sets": 2,
                    "restTime": 20,
                },
                {
                    "exercise": {"nome": "Polichinelo", "tipo": "timer"},
                    "duration": 60,
                    "sets": 1,
                    "restTime": 0,
                },
                {
                    "exercise": {"nome": "Burpee", "tipo": "timer"},
                    "sets": 1,
                    "restTime": 10,
                },
                {
                    "exercise": {"nome": "Flexão", "tipo": "reps"},
                    "reps": 12,
                    "sets": 3,
                    "restTime": 30,
                },
            ],
        }
    )
    assert plan.name == "Treino do dia"
    assert plan.estimated_calories == 120
    assert [ex.name for ex in plan.exercises] == [
        "Prancha",
        "Polichinelo",
        "Burpee",
        "Flexão",
    ]
    assert plan[0].mode == Timed(45)
    assert plan[1].mode == Timed(60)
    assert plan[1].rest_seconds == 0
    assert plan[2].mode == Timed(DEFAULT_TIMED_DURATION)
    assert plan[3].mode == Counted(12)
    assert plan.save_history


def test_api_workout_preview_skips_history():
    plan = plan_from_api_workout(
        {
            "skipSaveHistory": True,
            "exercises": [{"exercise": {"nome": "Agachamento"}, "reps": 10, "sets": 1}],
        }
    )
    assert not plan.save_history


def test_single_exercise_plan():
    plan = single_exercise_plan({"name": "Dip", "calories": 2}, Counted(8))
    assert len(plan) == 1
    assert plan[0].sets == DEFAULT_SETS_PER_EXERCISE
    assert plan[0].rest_seconds == DEFAULT_REST_DURATION
    assert plan.name == "Dip"
    assert plan.estimated_calories == 2 * DEFAULT_SETS_PER_EXERCISE
    assert not plan.save_history

    custom_rest = single_exercise_plan({"name": "Dip"}, Timed(20), rest_seconds=0)
    assert custom_rest[0].rest_seconds == 0


def test_load_plan(tmp_path):
    path = tmp_path / "plan.json"
    path.write_text(
        json.dumps(
            {
                "name": "Legs",
                "exercises": [
                    {
                        "exercise": {"name": "Lunge"},
                        "mode": {"kind": "counted", "reps": 10},
                        "sets": 2,
                        "rest_seconds": 30,
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    plan = load_plan(path)
    assert plan.name == "Legs"
    assert plan.total_units == 2


def test_sample_plan_loads():
    from core import DEFAULT_PLAN_PATH

    plan = load_plan(DEFAULT_PLAN_PATH)
    assert len(plan) == 3
    assert plan[-1].rest_seconds == 0
