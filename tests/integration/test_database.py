"""
Tests for DatabaseInterface.

Tests CRUD operations with a temporary test database.
"""

import sqlite3

import pytest

from mealplanner.data.database import DatabaseInterface


class TestDatabaseInitialization:
    """Test database initialization."""

    def test_database_creates_tables(self, db):
        """Test that database creates all required tables."""
        with sqlite3.connect(db.user_db) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in cursor.fetchall()}

        assert {
            "ingredients", "tags", "meal_types", "meals",
            "meal_tags", "meal_meal_types", "meal_ingredients",
        } <= tables

    def test_init_is_idempotent(self, temp_db_dir, user_id):
        """Opening an existing database keeps its data."""
        first = DatabaseInterface(db_dir=temp_db_dir)
        first.create_tag(user_id, "Zupy")

        second = DatabaseInterface(db_dir=temp_db_dir)
        assert [t.name for t in second.get_tags(user_id)] == ["Zupy"]


class TestReferenceData:
    """Test ingredient, tag and meal type operations."""

    def test_create_and_list_ingredients(self, db, user_id):
        db.create_ingredient(user_id, "Pomidor", category="Warzywa", default_unit="szt",
                             calories_per_100g=18, protein_per_100g=0.9)
        db.create_ingredient(user_id, "Mąka", category="Pieczywo")

        ingredients = db.get_ingredients(user_id)

        assert [i.name for i in ingredients] == ["Mąka", "Pomidor"]
        pomidor = ingredients[1]
        assert pomidor.default_unit == "szt"
        assert pomidor.calories_per_100g == 18
        assert pomidor.carbs_per_100g is None
        assert ingredients[0].default_unit == "g"

    def test_ingredient_names_not_unique(self, db, user_id):
        db.create_ingredient(user_id, "jajko", category="Nabiał")
        db.create_ingredient(user_id, "jajko", category="Nabiał")

        assert len(db.get_ingredients(user_id)) == 2

    def test_tag_default_color(self, db, user_id):
        tag = db.create_tag(user_id, "Zupy")

        assert tag.color == "#6b7280"
        assert db.get_tags(user_id)[0].to_dict()["name"] == "Zupy"

    def test_default_meal_types(self, db, user_id):
        meal_types = db.add_missing_default_meal_types(user_id)

        assert [mt.name for mt in meal_types] == [
            "Śniadanie", "II śniadanie", "Obiad", "Kolacja", "Przekąska",
        ]
        assert [mt.order for mt in meal_types] == [0, 1, 2, 3, 4]

    def test_default_meal_types_only_adds_missing(self, db, user_id):
        db.create_meal_type(user_id, "obiad", order=0)
        db.create_meal_type(user_id, "Podwieczorek", order=7)

        meal_types = db.add_missing_default_meal_types(user_id)
        names = [mt.name for mt in meal_types]

        assert len(meal_types) == 6
        assert "Obiad" not in names
        assert names[:2] == ["obiad", "Podwieczorek"]
        assert min(mt.order for mt in meal_types if mt.name == "Śniadanie") == 8

        # Running again changes nothing
        assert len(db.add_missing_default_meal_types(user_id)) == 6


class TestMealOperations:
    """Test meal creation and loading."""

    def test_create_meal_with_relations(self, seeded_db, user_id):
        tag = seeded_db.create_tag(user_id, "Szybkie")
        ingredient = seeded_db.create_ingredient(user_id, "jajko", category="Nabiał")
        obiad = next(mt for mt in seeded_db.get_meal_types(user_id) if mt.name == "Obiad")

        created = seeded_db.create_meal(user_id, {
            "name": "Omlet",
            "servings": 1,
            "is_vegetarian": True,
            "tag_ids": [tag.id],
            "meal_type_ids": [obiad.id],
            "ingredients_list": [{"ingredient_id": ingredient.id, "amount": 3, "unit": "szt"}],
        })

        meal = seeded_db.get_meal(created.id, user_id)
        assert meal.name == "Omlet"
        assert meal.servings == 1
        assert meal.is_vegetarian is True
        assert meal.is_vegan is False
        assert [t.name for t in meal.tags] == ["Szybkie"]
        assert [mt.name for mt in meal.meal_types] == ["Obiad"]
        assert meal.ingredients[0].amount == 3
        assert meal.ingredients[0].ingredient.name == "jajko"

        data = meal.to_dict()
        assert data["ingredients"][0]["ingredient"]["category"] == "Nabiał"
        assert data["is_vegetarian"] is True

    def test_store_default_servings(self, db, user_id):
        meal = db.create_meal(user_id, {"name": "Herbata"})
        assert db.get_meal(meal.id, user_id).servings == 2

    def test_name_required(self, db, user_id):
        with pytest.raises(ValueError):
            db.create_meal(user_id, {"name": "   "})

    def test_failed_association_rolls_back_meal(self, db, user_id):
        """A bad ingredient id leaves no half-written meal behind."""
        with pytest.raises(sqlite3.IntegrityError):
            db.create_meal(user_id, {
                "name": "Zepsute",
                "ingredients_list": [{"ingredient_id": "missing", "amount": 1, "unit": "szt"}],
            })

        assert db.get_meals(user_id) == []

    def test_get_meal_other_account(self, db, user_id):
        meal = db.create_meal(user_id, {"name": "Omlet"})

        assert db.get_meal(meal.id, "someone-else") is None
        assert db.get_meal("missing", user_id) is None

    def test_meal_str(self, db, user_id):
        meal = db.create_meal(user_id, {"name": "Zupa", "servings": 4,
                                        "prep_time_minutes": 10, "cook_time_minutes": 20})
        assert str(meal) == "Zupa | 4 porcje | 30 min"
