"""
Pytest configuration and shared fixtures.

Fixtures are reusable test setup that can be injected into tests.
"""

import pytest
import random
import tempfile
import shutil

from mealplanner.data.database import DatabaseInterface
from mealplanner.recipe_importer import RecipeImporter


@pytest.fixture
def temp_db_dir():
    """
    Create a temporary database directory for testing.

    This fixture is automatically cleaned up after each test.
    """
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def db(temp_db_dir):
    """
    Create a fresh DatabaseInterface for each test.

    Usage in tests:
        def test_something(db):
            db.create_tag("user-1", "Obiad")
    """
    return DatabaseInterface(db_dir=temp_db_dir)


@pytest.fixture
def user_id():
    """Account the tests import into."""
    return "user-1"


@pytest.fixture
def seeded_db(db, user_id):
    """Database whose account already has the default meal types."""
    db.add_missing_default_meal_types(user_id)
    return db


@pytest.fixture
def importer(seeded_db):
    """RecipeImporter with a seeded random source."""
    return RecipeImporter(seeded_db, rng=random.Random(42))


@pytest.fixture
def bolognese_markdown():
    """A complete recipe using every section."""
    return """# Spaghetti Bolognese

## Info
- Porcje: 4
- Przygotowanie: 15 min
- Gotowanie: 45 min
- Typ: Obiad, Kolacja
- Tagi: Włoskie, Makaron
- Opis: Klasyczne włoskie danie

## Składniki
- 500g mielona wołowina
- 400g pomidory krojone
- 200g makaron spaghetti
- 1 szt cebula
- 2 ząbki czosnek
- 2 łyżki oliwy

## Instrukcje
1. Podsmaż cebulę na oliwie
2. Dodaj mięso i smaż do zbrązowienia
3. Dodaj pomidory i gotuj 30 min

## Cechy
- Dla dzieci
"""


@pytest.fixture
def three_recipes_markdown():
    """Three short recipes separated by horizontal rules."""
    return """# Jajecznica

## Info
- Typ: Śniadanie
- Tagi: Szybkie

## Składniki
- 3 szt jajko
- 10g masło

---

# Zupa pomidorowa

## Info
- Typ: Obiad
- Tagi: Zupy

## Składniki
- 1 l bulion
- 400g pomidory krojone

---

# Kanapka

## Składniki
- 2 kromki chleba
- 1 plaster sera
"""
