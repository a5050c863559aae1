from __future__ import annotations

from app import FitnessApp
from models import ProgramPlan

STARTER_EXERCISES = [
    {
        "id": "seated-shoulder-press",
        "name": "Seated Shoulder Press with Dumbbells",
        "aliases": ["Dumbbell Shoulder Press", "Seated Press"],
        "movement_pattern": "press",
        "primary_muscles": ["shoulders", "upper back"],
        "secondary_muscles": ["core", "triceps"],
        "equipment": ["dumbbells", "bench with back support"],
        "step_by_step_instructions": [
            "Sit on a bench with back support, holding a dumbbell in each hand",
            "Start with dumbbells at shoulder height, elbows below shoulders",
            "Press dumbbells straight up until arms are nearly straight",
            "Lower slowly back to shoulder height",
        ],
        "safety_notes": [
            "Keep your back against the bench support at all times",
            "Stop if you feel any shoulder discomfort above 2 out of 10",
        ],
    },
    {
        "id": "romanian-deadlift",
        "name": "Romanian Deadlift with Dumbbells",
        "aliases": ["RDL", "Dumbbell RDL", "Stiff Leg Deadlift"],
        "movement_pattern": "hinge",
        "primary_muscles": ["back of thigh", "buttocks", "lower back"],
        "secondary_muscles": ["core", "upper back"],
        "equipment": ["dumbbells"],
        "step_by_step_instructions": [
            "Stand tall holding dumbbells in front of your thighs",
            "Keep knees slightly bent throughout the movement",
            "Push your hips back and lower the weights slowly toward the floor",
            "Return to standing by pushing your hips forward",
        ],
        "safety_notes": [
            "Keep your spine neutral and stop if lower back discomfort goes above 2 out of 10",
            "Keep the dumbbells close to your body",
        ],
    },
    {
        "id": "goblet-squat",
        "name": "Goblet Squat",
        "aliases": ["Goblet Squat with Dumbbell", "Front-loaded Squat"],
        "beginner_friendly_name": "Goblet squat holding one dumbbell",
        "movement_pattern": "squat",
        "primary_muscles": ["thighs", "buttocks", "core"],
        "secondary_muscles": ["calves", "upper back"],
        "equipment": ["dumbbell"],
        "step_by_step_instructions": [
            "Hold one dumbbell close to your chest with both hands",
            "Stand with feet shoulder-width apart, toes slightly turned out",
            "Lower down by pushing your hips back and bending your knees",
            "Push through your heels to return to standing",
        ],
        "safety_notes": [
            "Keep your knees tracking over your toes",
            "Work within your comfortable range",
        ],
    },
    {
        "id": "band-row",
        "name": "Seated Row with Resistance Band",
        "aliases": ["Band Row", "Seated Cable Row Alternative"],
        "movement_pattern": "pull",
        "primary_muscles": ["upper back", "back of shoulders"],
        "secondary_muscles": ["biceps", "core"],
        "equipment": ["resistance band"],
        "step_by_step_instructions": [
            "Sit on the floor with legs extended, band around your feet",
            "Pull the band handles toward your ribcage",
            "Slowly return to the starting position with control",
        ],
        "safety_notes": ["Keep your back straight throughout"],
    },
    {
        "id": "wall-push-up",
        "name": "Wall Push-Up",
        "aliases": ["Standing Push-Up", "Vertical Push-Up"],
        "movement_pattern": "press",
        "primary_muscles": ["chest", "front of shoulders", "triceps"],
        "secondary_muscles": ["core"],
        "equipment": ["wall"],
        "step_by_step_instructions": [
            "Stand arm's length from a wall with palms flat at shoulder height",
            "Lean toward the wall by bending your elbows",
            "Push back to the starting position",
        ],
        "safety_notes": ["Keep your body straight and do not let your hips sag"],
    },
    {
        "id": "plank-hold",
        "name": "Plank Hold",
        "aliases": ["Front Plank", "Forearm Plank"],
        "movement_pattern": "core",
        "primary_muscles": ["core", "deep abdominals"],
        "secondary_muscles": ["shoulders", "back", "glutes"],
        "step_by_step_instructions": [
            "Start on your forearms and toes, or knees for an easier version",
            "Keep a straight line from head to heels",
            "Hold for the prescribed time while breathing normally",
        ],
        "safety_notes": ["Stop if you feel lower back discomfort above 2 out of 10"],
    },
    {
        "id": "walking-in-place",
        "name": "Walking in Place",
        "aliases": ["Stationary Walking", "Marching in Place"],
        "movement_pattern": "carry",
        "exercise_type": "cardio",
        "primary_muscles": ["legs", "core"],
        "secondary_muscles": ["arms"],
        "step_by_step_instructions": [
            "Stand tall and lift one knee toward your chest",
            "Alternate legs in a walking motion at a steady pace",
        ],
        "safety_notes": ["Stop if you feel dizzy or overly breathless"],
    },
]

# exercise ids added to the starter plan per session type
PLAN_EXERCISES = {
    "strength": ["goblet-squat", "romanian-deadlift"],
    "intervals": ["walking-in-place"],
}

STARTER_GLOSSARY = [
    {
        "term": "Repetition",
        "category": "exercise",
        "plain_definition": "One complete movement of an exercise, from start to finish.",
        "why_it_matters": "Counting repetitions tells you how much work you did.",
        "related_terms": ["Set"],
    },
    {
        "term": "Set",
        "category": "exercise",
        "plain_definition": "A group of repetitions done without resting.",
        "why_it_matters": "Sets organize your workout into manageable chunks.",
        "related_terms": ["Repetition", "Rest Period"],
    },
    {
        "term": "Rest Period",
        "category": "recovery",
        "plain_definition": "The pause between sets that lets your muscles recover.",
        "how_to_do_it_safely": ["Walk around gently", "Breathe slowly"],
        "related_terms": ["Set"],
    },
    {
        "term": "RPE",
        "category": "technique",
        "plain_definition": "Rate of perceived exertion: how hard a set felt on a scale of 1 to 10.",
        "common_mistakes": ["Rating every set as maximum effort"],
        "difficulty_level": "intermediate",
        "related_terms": ["Repetition"],
    },
    {
        "term": "Deload",
        "category": "recovery",
        "plain_definition": "A lighter week of training that lets your body catch up.",
        "related_terms": ["Rest Period"],
    },
]


def seed(app: FitnessApp | None = None) -> ProgramPlan | None:
    """Insert starter exercises, glossary terms and a starter plan template."""
    app = app or FitnessApp().init()
    if app.exercises.count() == 0:
        app.exercises.save_batch(STARTER_EXERCISES)
        print(f"Inserted {len(STARTER_EXERCISES)} exercises")
    if app.glossary.count() == 0:
        app.glossary.save_batch(STARTER_GLOSSARY)
        print(f"Inserted {len(STARTER_GLOSSARY)} glossary terms")
    if app.plans.get_templates():
        print("Database already contains plan templates")
        return None
    plan = app.planner.create_new_plan("Beginner Full Body")
    for path, _day, session in plan.iter_sessions():
        for exercise in app.exercises.get_many(PLAN_EXERCISES.get(session.session_type, [])):
            app.planner.add_exercise_to_session(plan.id, path, exercise)
    plan = app.plans.update(plan.id, {"is_template": True, "tags": ["beginner", "full body"]})
    print("Seed data inserted")
    return plan


if __name__ == "__main__":
    seed()
