from db import ExerciseRepository, WorkoutRepository
from models import Exercise, Workout, WorkoutExercise


SAMPLE_EXERCISES = [
    Exercise(
        id="ex1",
        name="Barbell Bench Press",
        description="Press a barbell from the chest while lying on a flat bench.",
        muscle_groups=["Chest", "Triceps", "Shoulders"],
        equipment=["Barbell", "Bench"],
        difficulty="intermediate",
    ),
    Exercise(
        id="ex2",
        name="Back Squat",
        description="Squat with a barbell resting on the upper back.",
        muscle_groups=["Quadriceps", "Glutes", "Hamstrings"],
        equipment=["Barbell", "Squat Rack"],
        difficulty="intermediate",
    ),
    Exercise(
        id="ex3",
        name="Deadlift",
        description="Lift a loaded barbell from the floor to hip height.",
        muscle_groups=["Hamstrings", "Glutes", "Back"],
        equipment=["Barbell"],
        difficulty="advanced",
    ),
    Exercise(
        id="ex4",
        name="Pull-Up",
        description="Pull the body up until the chin clears the bar.",
        muscle_groups=["Back", "Biceps"],
        equipment=["Pull-Up Bar"],
        difficulty="intermediate",
    ),
    Exercise(
        id="ex5",
        name="Plank",
        description="Hold a straight body position on forearms and toes.",
        muscle_groups=["Core"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex6",
        name="Overhead Press",
        description="Press a barbell from the shoulders to overhead.",
        muscle_groups=["Shoulders", "Triceps"],
        equipment=["Barbell"],
        difficulty="intermediate",
    ),
    Exercise(
        id="ex7",
        name="Push-Up",
        description="Lower and raise the body with the hands under the shoulders.",
        muscle_groups=["Chest", "Triceps"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex8",
        name="Glute Bridge",
        description="Drive the hips up from a lying position.",
        muscle_groups=["Glutes", "Hamstrings"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex9",
        name="Bodyweight Squat",
        description="Squat to depth without external load.",
        muscle_groups=["Quadriceps", "Glutes"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex10",
        name="Lunges",
        description="Step forward and lower the back knee toward the floor.",
        muscle_groups=["Quadriceps", "Glutes"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex11",
        name="Dead Bug",
        description="Extend opposite arm and leg while keeping the low back flat.",
        muscle_groups=["Core"],
        equipment=[],
        difficulty="beginner",
    ),
    Exercise(
        id="ex12",
        name="Burpee",
        description="Squat thrust followed by a jump.",
        muscle_groups=["Full Body"],
        equipment=[],
        difficulty="intermediate",
    ),
]


def _refs(*exercise_ids: str, sets: int = 3, reps: int = 10, rest: int = 60):
    return [
        WorkoutExercise(id=eid, sets=sets, reps=reps, rest_time=rest)
        for eid in exercise_ids
    ]


SAMPLE_WORKOUTS = [
    Workout(
        id="w1",
        name="Full Body Strength",
        description="A comprehensive full-body workout targeting all major muscle groups.",
        category="Strength",
        difficulty="intermediate",
        intensity="high",
        estimated_duration=60,
        duration=60,
        exercises=_refs("ex1", "ex2", "ex3", "ex6", sets=4, reps=6, rest=120),
    ),
    Workout(
        id="w2",
        name="Upper Body Focus",
        description="Concentrate on developing your chest, back, and arms.",
        category="Strength",
        difficulty="intermediate",
        intensity="medium",
        estimated_duration=45,
        exercises=_refs("ex1", "ex4", "ex6", reps=8, rest=90),
    ),
    Workout(
        id="w3",
        name="Lower Body Power",
        description="Build strength and power in your legs and glutes.",
        category="Strength",
        difficulty="advanced",
        intensity="high",
        estimated_duration=40,
        exercises=_refs("ex2", "ex3", "ex10", sets=5, reps=5, rest=150),
    ),
    Workout(
        id="w4",
        name="Core Stability",
        description="Strengthen your core for better posture and balance.",
        category="Core",
        difficulty="beginner",
        intensity="medium",
        estimated_duration=30,
        exercises=_refs("ex5", "ex11", "ex8"),
    ),
    Workout(
        id="w5",
        name="Bodyweight Basics",
        description="Fundamental bodyweight movements for beginners.",
        category="Bodyweight",
        difficulty="beginner",
        intensity="low",
        estimated_duration=30,
        exercises=_refs("ex7", "ex9", "ex10", "ex5"),
    ),
    Workout(
        id="w6",
        name="HIIT Bodyweight Circuit",
        description="Short, intense intervals to raise your heart rate.",
        category="HIIT",
        difficulty="intermediate",
        intensity="high",
        estimated_duration=25,
        exercises=_refs("ex12", "ex9", "ex7", reps=15, rest=30),
    ),
    Workout(
        id="w17",
        name="Mobility & Flexibility",
        description="Improve your range of motion and prevent injuries.",
        category="Mobility",
        difficulty="beginner",
        intensity="low",
        estimated_duration=30,
        exercises=_refs("ex9", "ex10", "ex8", "ex11", sets=2, rest=30),
    ),
    Workout(
        id="w22",
        name="15-Minute Energy Boost",
        description="A quick routine to wake up the whole body.",
        category="Cardio",
        difficulty="beginner",
        intensity="low",
        estimated_duration=15,
        exercises=_refs("ex9", "ex7", "ex12", sets=2, reps=12, rest=30),
    ),
    Workout(
        id="w24",
        name="Gentle Mobility Session",
        description="Easy movement and stretching for recovery days.",
        category="Recovery",
        difficulty="beginner",
        intensity="low",
        estimated_duration=20,
        exercises=_refs("ex8", "ex11", sets=2, reps=8, rest=30),
    ),
    Workout(
        id="w25",
        name="25-Minute Upper Body",
        description="Time-efficient push and pull work.",
        category="Strength",
        difficulty="beginner",
        intensity="medium",
        estimated_duration=25,
        exercises=_refs("ex7", "ex4", "ex1", reps=8),
    ),
]


def seed(db_path: str = "workout.db") -> bool:
    """Load the sample catalog into an empty database."""
    exercises = ExerciseRepository(db_path)
    workouts = WorkoutRepository(db_path)
    if workouts.fetch_all():
        print("Database already contains workouts")
        return False
    exercises.bulk_save(SAMPLE_EXERCISES)
    for workout in SAMPLE_WORKOUTS:
        workouts.save(workout)
    print("Seed data inserted")
    return True


if __name__ == "__main__":
    seed()
