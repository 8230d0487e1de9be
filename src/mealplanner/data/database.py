"""
Database interface for the meal planner.

Manages one SQLite database (user_data.db) holding account-scoped
ingredients, tags, meal types and meals with their associations.
"""

import sqlite3
import logging
import uuid
from typing import List, Optional, Dict, Any
from datetime import datetime
from pathlib import Path

from .models import Ingredient, Tag, MealType, Meal, MealIngredient, FEATURE_FIELDS
from ..unit_canon import DEFAULT_MEAL_TYPES, DEFAULT_TAG_COLOR

logger = logging.getLogger(__name__)

# Scalar meal columns callers may set through create_meal()
MEAL_COLUMNS = (
    "name",
    "description",
    "instructions",
    "image_url",
    "servings",
    "prep_time_minutes",
    "cook_time_minutes",
    "calories",
    "protein",
    "carbs",
    "fat",
) + FEATURE_FIELDS


def generate_id() -> str:
    """New random primary key."""
    return str(uuid.uuid4())


class DatabaseInterface:
    """Interface for interacting with the SQLite database."""

    def __init__(self, db_dir: str = "data"):
        """
        Initialize database interface.

        Args:
            db_dir: Directory containing database files
        """
        self.db_dir = Path(db_dir)
        self.db_dir.mkdir(parents=True, exist_ok=True)

        self.user_db = self.db_dir / "user_data.db"

        self._init_user_database()

    def _connect(self) -> sqlite3.Connection:
        """Open a connection with row access by name and FK enforcement."""
        conn = sqlite3.connect(self.user_db)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_user_database(self):
        """Initialize database schema."""
        with self._connect() as conn:
            cursor = conn.cursor()

            # Ingredients - shared per account
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ingredients (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    default_unit TEXT NOT NULL DEFAULT 'g',
                    calories_per_100g REAL,
                    protein_per_100g REAL,
                    carbs_per_100g REAL,
                    fat_per_100g REAL,
                    created_at TEXT NOT NULL
                )
            """)

            # Meals - shared per account
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meals (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    instructions TEXT,
                    image_url TEXT,
                    servings INTEGER NOT NULL DEFAULT 2,
                    prep_time_minutes INTEGER,
                    cook_time_minutes INTEGER,
                    calories INTEGER,
                    protein REAL,
                    carbs REAL,
                    fat REAL,
                    is_vegetarian BOOLEAN NOT NULL DEFAULT 0,
                    is_vegan BOOLEAN NOT NULL DEFAULT 0,
                    is_gluten_free BOOLEAN NOT NULL DEFAULT 0,
                    is_lactose_free BOOLEAN NOT NULL DEFAULT 0,
                    is_quick BOOLEAN NOT NULL DEFAULT 0,
                    is_meal_prep BOOLEAN NOT NULL DEFAULT 0,
                    is_child_friendly BOOLEAN NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL DEFAULT '#6b7280',
                    created_at TEXT NOT NULL
                )
            """)

            # Meal types (Śniadanie, Obiad, Kolacja, Przekąska)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_types (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    sort_order INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            # Junction: meals <-> tags
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_tags (
                    meal_id TEXT NOT NULL,
                    tag_id TEXT NOT NULL,
                    PRIMARY KEY (meal_id, tag_id),
                    FOREIGN KEY (meal_id) REFERENCES meals(id) ON DELETE CASCADE,
                    FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE
                )
            """)

            # Junction: meals <-> meal types
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_meal_types (
                    meal_id TEXT NOT NULL,
                    meal_type_id TEXT NOT NULL,
                    PRIMARY KEY (meal_id, meal_type_id),
                    FOREIGN KEY (meal_id) REFERENCES meals(id) ON DELETE CASCADE,
                    FOREIGN KEY (meal_type_id) REFERENCES meal_types(id) ON DELETE CASCADE
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_ingredients (
                    id TEXT PRIMARY KEY,
                    meal_id TEXT NOT NULL,
                    ingredient_id TEXT NOT NULL,
                    amount REAL NOT NULL,
                    unit TEXT NOT NULL,
                    FOREIGN KEY (meal_id) REFERENCES meals(id) ON DELETE CASCADE,
                    FOREIGN KEY (ingredient_id) REFERENCES ingredients(id) ON DELETE CASCADE
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_ingredients_user ON ingredients(user_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_tags_user ON tags(user_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_meal_types_user ON meal_types(user_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_meals_user ON meals(user_id)")
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_meal_ingredients_meal
                ON meal_ingredients(meal_id)
            """)

            conn.commit()
            logger.info("User database initialized")

    # ==================== Ingredient Operations ====================

    def get_ingredients(self, user_id) -> List[Ingredient]:
        """
        Get all ingredients for an account.

        Args:
            user_id: Account ID

        Returns:
            List of Ingredient objects ordered by name
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM ingredients WHERE user_id = ? ORDER BY name",
                (str(user_id),),
            )
            return [Ingredient.from_row(row) for row in cursor.fetchall()]

    def create_ingredient(
        self,
        user_id,
        name: str,
        category: str,
        default_unit: str = "g",
        calories_per_100g: Optional[float] = None,
        protein_per_100g: Optional[float] = None,
        carbs_per_100g: Optional[float] = None,
        fat_per_100g: Optional[float] = None,
    ) -> Ingredient:
        """
        Create a new ingredient.

        Names are not unique: callers that want to avoid duplicates
        must look up existing ingredients first.

        Returns:
            The created Ingredient
        """
        ingredient = Ingredient(
            id=generate_id(),
            user_id=str(user_id),
            name=name,
            category=category,
            default_unit=default_unit,
            calories_per_100g=calories_per_100g,
            protein_per_100g=protein_per_100g,
            carbs_per_100g=carbs_per_100g,
            fat_per_100g=fat_per_100g,
        )

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO ingredients
                (id, user_id, name, category, default_unit, calories_per_100g,
                 protein_per_100g, carbs_per_100g, fat_per_100g, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    ingredient.id,
                    ingredient.user_id,
                    ingredient.name,
                    ingredient.category,
                    ingredient.default_unit,
                    ingredient.calories_per_100g,
                    ingredient.protein_per_100g,
                    ingredient.carbs_per_100g,
                    ingredient.fat_per_100g,
                    ingredient.created_at.isoformat(),
                ),
            )
            conn.commit()

        logger.debug(f"Created ingredient {ingredient.name} ({ingredient.id})")
        return ingredient

    # ==================== Tag Operations ====================

    def get_tags(self, user_id) -> List[Tag]:
        """Get all tags for an account, ordered by name."""
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM tags WHERE user_id = ? ORDER BY name",
                (str(user_id),),
            )
            return [Tag.from_row(row) for row in cursor.fetchall()]

    def create_tag(self, user_id, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        """Create a new tag."""
        tag = Tag(id=generate_id(), user_id=str(user_id), name=name, color=color)

        with self._connect() as conn:
            conn.execute(
                "INSERT INTO tags (id, user_id, name, color, created_at) VALUES (?, ?, ?, ?, ?)",
                (tag.id, tag.user_id, tag.name, tag.color, tag.created_at.isoformat()),
            )
            conn.commit()

        logger.debug(f"Created tag {tag.name} ({tag.id})")
        return tag

    # ==================== Meal Type Operations ====================

    def get_meal_types(self, user_id) -> List[MealType]:
        """Get all meal types for an account, in display order."""
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM meal_types WHERE user_id = ? ORDER BY sort_order, name",
                (str(user_id),),
            )
            return [MealType.from_row(row) for row in cursor.fetchall()]

    def create_meal_type(self, user_id, name: str, order: int = 0) -> MealType:
        """Create a new meal type."""
        meal_type = MealType(id=generate_id(), user_id=str(user_id), name=name, order=order)

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO meal_types (id, user_id, name, sort_order, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    meal_type.id,
                    meal_type.user_id,
                    meal_type.name,
                    meal_type.order,
                    meal_type.created_at.isoformat(),
                ),
            )
            conn.commit()

        return meal_type

    def add_missing_default_meal_types(self, user_id) -> List[MealType]:
        """
        Seed the default meal types an account does not have yet.

        Existing names are compared case-insensitively. New types are
        ordered after the account's current highest order.

        Returns:
            The account's full meal-type list after seeding
        """
        existing = self.get_meal_types(user_id)
        existing_names = {mt.name.lower() for mt in existing}
        missing = [
            name for name, _ in DEFAULT_MEAL_TYPES
            if name.lower() not in existing_names
        ]

        if missing:
            max_order = max((mt.order for mt in existing), default=-1)
            for index, name in enumerate(missing):
                self.create_meal_type(user_id, name, order=max_order + 1 + index)
            logger.info(f"Added {len(missing)} default meal types for user {user_id}")

        return self.get_meal_types(user_id)

    # ==================== Meal Operations ====================

    def create_meal(self, user_id, data: Dict[str, Any]) -> Meal:
        """
        Create a meal together with its associations.

        The meal row and all association rows are written in one
        transaction: if any insert fails nothing is stored.

        Args:
            user_id: Account ID
            data: Meal fields (see MEAL_COLUMNS) plus optional
                  "tag_ids", "meal_type_ids" and "ingredients_list"
                  (dicts with ingredient_id, amount, unit)

        Returns:
            The created Meal (without loaded relations)

        Raises:
            ValueError: If the meal has no name
            sqlite3.Error: If an insert fails (e.g., unknown ingredient id)
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValueError("Meal name is required")

        fields = {column: data[column] for column in MEAL_COLUMNS if column in data}
        fields["name"] = name
        meal = Meal(id=generate_id(), user_id=str(user_id), **fields)

        tag_ids = data.get("tag_ids") or []
        meal_type_ids = data.get("meal_type_ids") or []
        ingredients_list = data.get("ingredients_list") or []

        columns = ("id", "user_id") + MEAL_COLUMNS + ("created_at", "updated_at")
        values = [getattr(meal, column) for column in ("id", "user_id") + MEAL_COLUMNS]
        values += [meal.created_at.isoformat(), meal.updated_at.isoformat()]

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO meals ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )

            cursor.executemany(
                "INSERT INTO meal_tags (meal_id, tag_id) VALUES (?, ?)",
                [(meal.id, tag_id) for tag_id in tag_ids],
            )
            cursor.executemany(
                "INSERT INTO meal_meal_types (meal_id, meal_type_id) VALUES (?, ?)",
                [(meal.id, meal_type_id) for meal_type_id in meal_type_ids],
            )
            cursor.executemany(
                """
                INSERT INTO meal_ingredients (id, meal_id, ingredient_id, amount, unit)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (generate_id(), meal.id, ing["ingredient_id"], ing["amount"], ing["unit"])
                    for ing in ingredients_list
                ],
            )
            conn.commit()

        logger.info(f"Saved meal {meal.name} ({meal.id}) for user {user_id}")
        return meal

    def get_meals(self, user_id) -> List[Meal]:
        """
        Get all meals for an account with their relations.

        Returns:
            List of Meal objects ordered by name
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM meals WHERE user_id = ? ORDER BY name, created_at",
                (str(user_id),),
            ).fetchall()
            return [self._load_relations(conn, Meal.from_row(row)) for row in rows]

    def get_meal(self, meal_id: str, user_id) -> Optional[Meal]:
        """
        Get one meal with its relations.

        Returns:
            Meal object or None if not found for this account
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM meals WHERE id = ? AND user_id = ?",
                (meal_id, str(user_id)),
            ).fetchone()
            if row is None:
                return None
            return self._load_relations(conn, Meal.from_row(row))

    def _load_relations(self, conn: sqlite3.Connection, meal: Meal) -> Meal:
        """Attach tags, meal types and ingredient usages to a meal."""
        meal.tags = [
            Tag.from_row(row)
            for row in conn.execute(
                """
                SELECT t.* FROM tags t
                JOIN meal_tags mt ON mt.tag_id = t.id
                WHERE mt.meal_id = ?
                ORDER BY t.name
                """,
                (meal.id,),
            )
        ]

        meal.meal_types = [
            MealType.from_row(row)
            for row in conn.execute(
                """
                SELECT m.* FROM meal_types m
                JOIN meal_meal_types mmt ON mmt.meal_type_id = m.id
                WHERE mmt.meal_id = ?
                ORDER BY m.sort_order
                """,
                (meal.id,),
            )
        ]

        meal.ingredients = []
        for row in conn.execute(
            """
            SELECT mi.id AS usage_id, mi.meal_id, mi.ingredient_id, mi.amount, mi.unit, i.*
            FROM meal_ingredients mi
            JOIN ingredients i ON i.id = mi.ingredient_id
            WHERE mi.meal_id = ?
            ORDER BY mi.rowid
            """,
            (meal.id,),
        ):
            meal.ingredients.append(MealIngredient(
                id=row["usage_id"],
                meal_id=row["meal_id"],
                ingredient_id=row["ingredient_id"],
                amount=row["amount"],
                unit=row["unit"],
                ingredient=Ingredient.from_row(row),
            ))

        return meal
