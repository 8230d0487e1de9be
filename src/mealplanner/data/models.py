"""
Data models for the meal planner.

These models define the core entities used throughout the system:
- ParsedRecipe / ParsedIngredientLine: transient output of the markdown parser
- Ingredient, Tag, MealType: account-scoped reference data
- Meal: a persisted recipe with its ingredient, tag and meal-type associations
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict

from ..unit_canon import DEFAULT_TAG_COLOR, GENERIC_UNIT

# Attribute names of the seven boolean feature flags shared by ParsedRecipe and Meal
FEATURE_FIELDS = (
    "is_vegetarian",
    "is_vegan",
    "is_gluten_free",
    "is_lactose_free",
    "is_quick",
    "is_meal_prep",
    "is_child_friendly",
)


@dataclass
class ParsedIngredientLine:
    """One ingredient line from a markdown recipe.

    Produced by markdown_parser.parse_ingredient_line(); never persisted directly.
    """
    amount: float  # Always positive
    unit: str = GENERIC_UNIT  # Canonical unit (e.g., "g", "łyżka", "szt")
    name: str = ""  # Weight annotations like "(ok. 200g)" already stripped


@dataclass
class ParsedRecipe:
    """A recipe extracted from one markdown section.

    The parser never emits a ParsedRecipe without a name.
    """
    name: str
    description: Optional[str] = None
    servings: int = 1
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    meal_type_names: List[str] = field(default_factory=list)
    tag_names: List[str] = field(default_factory=list)
    ingredients: List[ParsedIngredientLine] = field(default_factory=list)
    instructions: Optional[str] = None

    # Feature flags ("Cechy" section)
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_lactose_free: bool = False
    is_quick: bool = False
    is_meal_prep: bool = False
    is_child_friendly: bool = False

    def features(self) -> Dict[str, bool]:
        """Feature flags keyed by attribute name."""
        return {name: getattr(self, name) for name in FEATURE_FIELDS}


@dataclass
class Ingredient:
    """Account-scoped ingredient with optional nutrition per 100g."""
    id: str
    user_id: str
    name: str
    category: str
    default_unit: str = "g"
    calories_per_100g: Optional[float] = None
    protein_per_100g: Optional[float] = None
    carbs_per_100g: Optional[float] = None
    fat_per_100g: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category,
            "default_unit": self.default_unit,
            "calories_per_100g": self.calories_per_100g,
            "protein_per_100g": self.protein_per_100g,
            "carbs_per_100g": self.carbs_per_100g,
            "fat_per_100g": self.fat_per_100g,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row) -> "Ingredient":
        """Create Ingredient from a sqlite3.Row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category=row["category"],
            default_unit=row["default_unit"],
            calories_per_100g=row["calories_per_100g"],
            protein_per_100g=row["protein_per_100g"],
            carbs_per_100g=row["carbs_per_100g"],
            fat_per_100g=row["fat_per_100g"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


@dataclass
class Tag:
    """Account-scoped label attached to meals."""
    id: str
    user_id: str
    name: str
    color: str = DEFAULT_TAG_COLOR
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "color": self.color,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row) -> "Tag":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            color=row["color"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


@dataclass
class MealType:
    """Account-defined meal slot (Śniadanie, Obiad, Kolacja, ...)."""
    id: str
    user_id: str
    name: str
    order: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "order": self.order,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row) -> "MealType":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            order=row["sort_order"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


@dataclass
class MealIngredient:
    """Ingredient usage inside one meal (per-meal amount and unit)."""
    id: str
    meal_id: str
    ingredient_id: str
    amount: float
    unit: str
    ingredient: Optional[Ingredient] = None  # Loaded with the meal

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "meal_id": self.meal_id,
            "ingredient_id": self.ingredient_id,
            "amount": self.amount,
            "unit": self.unit,
            "ingredient": self.ingredient.to_dict() if self.ingredient else None,
        }


@dataclass
class Meal:
    """A persisted recipe with its relations."""
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    image_url: Optional[str] = None
    servings: int = 2
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None

    # Nutrition per serving
    calories: Optional[int] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None

    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_lactose_free: bool = False
    is_quick: bool = False
    is_meal_prep: bool = False
    is_child_friendly: bool = False

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    # Relations
    tags: List[Tag] = field(default_factory=list)
    meal_types: List[MealType] = field(default_factory=list)
    ingredients: List[MealIngredient] = field(default_factory=list)

    def total_time(self) -> Optional[int]:
        """Prep + cook minutes, or None when neither is known."""
        if self.prep_time_minutes is None and self.cook_time_minutes is None:
            return None
        return (self.prep_time_minutes or 0) + (self.cook_time_minutes or 0)

    def __str__(self) -> str:
        """Human-readable meal summary."""
        parts = [self.name, f"{self.servings} porcje"]
        total = self.total_time()
        if total:
            parts.append(f"{total} min")
        if self.tags:
            parts.append(", ".join(tag.name for tag in self.tags))
        return " | ".join(parts)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "instructions": self.instructions,
            "image_url": self.image_url,
            "servings": self.servings,
            "prep_time_minutes": self.prep_time_minutes,
            "cook_time_minutes": self.cook_time_minutes,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "tags": [tag.to_dict() for tag in self.tags],
            "meal_types": [mt.to_dict() for mt in self.meal_types],
            "ingredients": [mi.to_dict() for mi in self.ingredients],
        }
        for name in FEATURE_FIELDS:
            data[name] = getattr(self, name)
        return data

    @classmethod
    def from_row(cls, row) -> "Meal":
        """Create Meal (without relations) from a sqlite3.Row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            instructions=row["instructions"],
            image_url=row["image_url"],
            servings=row["servings"],
            prep_time_minutes=row["prep_time_minutes"],
            cook_time_minutes=row["cook_time_minutes"],
            calories=row["calories"],
            protein=row["protein"],
            carbs=row["carbs"],
            fat=row["fat"],
            is_vegetarian=bool(row["is_vegetarian"]),
            is_vegan=bool(row["is_vegan"]),
            is_gluten_free=bool(row["is_gluten_free"]),
            is_lactose_free=bool(row["is_lactose_free"]),
            is_quick=bool(row["is_quick"]),
            is_meal_prep=bool(row["is_meal_prep"]),
            is_child_friendly=bool(row["is_child_friendly"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
