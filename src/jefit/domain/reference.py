"""Static reference tables for foods, workouts, goals and activity levels."""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class FoodReference:
    """Nutrients per 100 g and the default portion size in grams."""

    kcal: float
    protein: float
    carbs: float
    fat: float
    portion: float


@dataclass(frozen=True)
class WorkoutReference:
    """Energy burn rate for a workout type."""

    kcal_per_min: float
    category: str


@dataclass(frozen=True)
class GoalPreset:
    """Calorie deficit (negative) or surplus and protein intensity."""

    name: str
    deficit: int
    protein_multiplier: float
    description: str


@dataclass(frozen=True)
class ActivityLevel:
    """Multiplier applied to BMR for a lifestyle activity level."""

    name: str
    multiplier: float
    description: str


FOOD_DATABASE = MappingProxyType(
    {
        "Yogurt greco": FoodReference(kcal=97, protein=9, carbs=3, fat=5, portion=150),
        "Muesli": FoodReference(kcal=367, protein=10, carbs=66, fat=6, portion=50),
        "Banana": FoodReference(kcal=89, protein=1, carbs=23, fat=0, portion=120),
        "Uova": FoodReference(kcal=155, protein=13, carbs=1, fat=11, portion=100),
        "Pane integrale": FoodReference(
            kcal=247, protein=8, carbs=46, fat=3, portion=60
        ),
        "Latte": FoodReference(kcal=42, protein=3, carbs=5, fat=1, portion=200),
        "Avocado toast": FoodReference(
            kcal=190, protein=4, carbs=15, fat=14, portion=150
        ),
        "Riso integrale": FoodReference(
            kcal=111, protein=3, carbs=23, fat=1, portion=150
        ),
        "Pasta": FoodReference(kcal=131, protein=5, carbs=25, fat=1, portion=180),
        "Pollo": FoodReference(kcal=165, protein=31, carbs=0, fat=4, portion=150),
        "Salmone": FoodReference(kcal=208, protein=20, carbs=0, fat=13, portion=150),
        "Tonno": FoodReference(kcal=132, protein=29, carbs=0, fat=1, portion=150),
        "Manzo": FoodReference(kcal=250, protein=26, carbs=0, fat=15, portion=150),
        "Verdure miste": FoodReference(kcal=25, protein=2, carbs=5, fat=0, portion=200),
        "Insalata": FoodReference(kcal=15, protein=1, carbs=3, fat=0, portion=100),
        "Patate": FoodReference(kcal=77, protein=2, carbs=17, fat=0, portion=200),
        "Legumi": FoodReference(kcal=116, protein=9, carbs=20, fat=0, portion=150),
        "Frutta secca": FoodReference(
            kcal=607, protein=20, carbs=21, fat=54, portion=30
        ),
        "Barretta proteica": FoodReference(
            kcal=200, protein=20, carbs=22, fat=6, portion=60
        ),
        "Mela": FoodReference(kcal=52, protein=0, carbs=14, fat=0, portion=180),
        "Proteine whey": FoodReference(
            kcal=120, protein=24, carbs=3, fat=1, portion=30
        ),
    }
)

WORKOUT_DATABASE = MappingProxyType(
    {
        "Corsa": WorkoutReference(kcal_per_min=12, category="cardio"),
        "Corsa leggera": WorkoutReference(kcal_per_min=8, category="cardio"),
        "Camminata": WorkoutReference(kcal_per_min=5, category="cardio"),
        "Ciclismo": WorkoutReference(kcal_per_min=10, category="cardio"),
        "Nuoto": WorkoutReference(kcal_per_min=11, category="cardio"),
        "Pesi - Upper": WorkoutReference(kcal_per_min=7, category="strength"),
        "Pesi - Lower": WorkoutReference(kcal_per_min=8, category="strength"),
        "Pesi - Full Body": WorkoutReference(kcal_per_min=7, category="strength"),
        "HIIT": WorkoutReference(kcal_per_min=14, category="hiit"),
        "Yoga": WorkoutReference(kcal_per_min=3, category="recovery"),
        "Cardio": WorkoutReference(kcal_per_min=9, category="cardio"),
        "Crossfit": WorkoutReference(kcal_per_min=13, category="hiit"),
    }
)

GOALS = MappingProxyType(
    {
        "cut": GoalPreset(
            name="Definizione",
            deficit=-400,
            protein_multiplier=2.2,
            description="Fat loss while keeping muscle",
        ),
        "maintain": GoalPreset(
            name="Mantenimento",
            deficit=0,
            protein_multiplier=1.8,
            description="Keep the current weight",
        ),
        "bulk": GoalPreset(
            name="Massa",
            deficit=300,
            protein_multiplier=2.0,
            description="Muscle mass gain",
        ),
        "recomp": GoalPreset(
            name="Ricomposizione",
            deficit=-200,
            protein_multiplier=2.4,
            description="Less fat, more muscle",
        ),
    }
)

ACTIVITY_LEVELS = MappingProxyType(
    {
        "sedentary": ActivityLevel(
            name="Sedentario", multiplier=1.2, description="Desk job, little movement"
        ),
        "light": ActivityLevel(
            name="Leggero", multiplier=1.375, description="1-3 workouts per week"
        ),
        "moderate": ActivityLevel(
            name="Moderato", multiplier=1.55, description="3-5 workouts per week"
        ),
        "active": ActivityLevel(
            name="Attivo", multiplier=1.725, description="6-7 workouts per week"
        ),
        "veryActive": ActivityLevel(
            name="Molto attivo",
            multiplier=1.9,
            description="Athlete or physical job",
        ),
    }
)

GENDERS = frozenset({"male", "female"})
