"""
Import markdown recipes into an account.

Parses the document, then reconciles every recipe's ingredient, tag and
meal-type names against the account's data before saving it as a meal.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .data.database import DatabaseInterface
from .data.models import Ingredient, MealType, ParsedRecipe, Tag
from .markdown_parser import parse_markdown_recipes
from .unit_canon import DEFAULT_INGREDIENT_CATEGORY, TAG_COLORS

logger = logging.getLogger(__name__)

NO_RECIPES_ERROR = "Nie znaleziono żadnych przepisów w podanym tekście"
RECIPE_ERROR_TEMPLATE = 'Błąd przy imporcie "{name}": {reason}'


@dataclass
class ImportResult:
    """Summary of one import call."""
    imported: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0 and not self.errors

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {"imported": self.imported, "errors": list(self.errors)}


class RecipeImporter:
    """Reconciles parsed recipes with an account's data and saves them."""

    def __init__(self, db: DatabaseInterface, rng: Optional[random.Random] = None):
        """
        Initialize the importer.

        Args:
            db: Store holding ingredients, tags, meal types and meals
            rng: Random source for new tag colors (seed it for repeatable colors)
        """
        self.db = db
        self.rng = rng or random.Random()

    def import_markdown(self, markdown: str, user_id) -> ImportResult:
        """
        Import every recipe found in a markdown document.

        Recipes are processed in document order. A failure while saving
        one recipe is recorded in the result and the next recipe is tried.

        Args:
            markdown: Raw document text
            user_id: Account the recipes are imported into

        Returns:
            ImportResult with the number of saved meals and one error
            string per failed recipe

        Raises:
            sqlite3.Error: If the account's reference data cannot be loaded
        """
        recipes = parse_markdown_recipes(markdown)
        if not recipes:
            logger.info(f"No recipes found in import for user {user_id}")
            return ImportResult(imported=0, errors=[NO_RECIPES_ERROR])

        logger.info(f"Importing {len(recipes)} recipes for user {user_id}")

        # Lookup caches keyed by lowercased name, scoped to this call
        ingredients = _index_by_name(self.db.get_ingredients(user_id))
        meal_types = _index_by_name(self.db.get_meal_types(user_id))
        tags = _index_by_name(self.db.get_tags(user_id))

        result = ImportResult()
        for recipe in recipes:
            try:
                self._import_recipe(recipe, user_id, ingredients, meal_types, tags)
                result.imported += 1
            except Exception as e:
                logger.warning(f"Failed to import recipe {recipe.name!r}: {e}", exc_info=True)
                result.errors.append(RECIPE_ERROR_TEMPLATE.format(name=recipe.name, reason=e))

        logger.info(
            f"Import finished for user {user_id}: "
            f"{result.imported} imported, {len(result.errors)} failed"
        )
        return result

    def _import_recipe(
        self,
        recipe: ParsedRecipe,
        user_id,
        ingredients: Dict[str, Ingredient],
        meal_types: Dict[str, MealType],
        tags: Dict[str, Tag],
    ):
        """Resolve one recipe's names to ids and save it."""
        ingredients_list = []
        for line in recipe.ingredients:
            ingredient = ingredients.get(line.name.lower())
            if ingredient is None:
                ingredient = self.db.create_ingredient(
                    user_id,
                    name=line.name,
                    category=DEFAULT_INGREDIENT_CATEGORY,
                    default_unit=line.unit,
                )
                ingredients[line.name.lower()] = ingredient
                logger.info(f"Created ingredient {ingredient.name!r} while importing {recipe.name!r}")
            ingredients_list.append({
                "ingredient_id": ingredient.id,
                "amount": line.amount,
                "unit": line.unit,
            })

        # Meal types are never created, unknown names are dropped
        meal_type_ids = []
        for name in recipe.meal_type_names:
            meal_type = meal_types.get(name.lower())
            if meal_type is None:
                logger.debug(f"Unknown meal type {name!r} in {recipe.name!r}, skipping")
            elif meal_type.id not in meal_type_ids:
                meal_type_ids.append(meal_type.id)

        tag_ids = []
        for name in recipe.tag_names:
            tag = tags.get(name.lower())
            if tag is None:
                tag = self.db.create_tag(user_id, name=name, color=self.rng.choice(TAG_COLORS))
                tags[name.lower()] = tag
                logger.info(f"Created tag {tag.name!r} while importing {recipe.name!r}")
            if tag.id not in tag_ids:
                tag_ids.append(tag.id)

        data = {
            "name": recipe.name,
            "description": recipe.description,
            "instructions": recipe.instructions,
            "servings": recipe.servings,
            "prep_time_minutes": recipe.prep_time_minutes,
            "cook_time_minutes": recipe.cook_time_minutes,
            "tag_ids": tag_ids,
            "meal_type_ids": meal_type_ids,
            "ingredients_list": ingredients_list,
        }
        data.update(recipe.features())

        return self.db.create_meal(user_id, data)


def _index_by_name(entities) -> Dict:
    """Map lowercased name -> entity; the first entity with a name wins."""
    index = {}
    for entity in entities:
        index.setdefault(entity.name.lower(), entity)
    return index
