#!/usr/bin/env python3
"""
Command line entry point for the meal planner.

Imports markdown recipe files into an account and lists stored meals.
"""

import logging
import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .data.database import DatabaseInterface
from .markdown_parser import EXAMPLE_DOCUMENT
from .recipe_importer import ImportResult, RecipeImporter

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".md", ".markdown", ".txt")
DEFAULT_DB_DIR = os.environ.get("MEALPLANNER_DB_DIR", "data")
DEFAULT_USER_ID = os.environ.get("MEALPLANNER_USER_ID", "1")


class MealPlanner:
    """Ties the store and the importer together for CLI use."""

    def __init__(self, db_dir: str = DEFAULT_DB_DIR):
        """
        Initialize the meal planner.

        Args:
            db_dir: Directory containing the database
        """
        self.db = DatabaseInterface(db_dir=db_dir)
        self.importer = RecipeImporter(self.db)
        logger.info(f"Meal planner initialized (db_dir={db_dir})")

    def import_file(self, path: str, user_id: str, seed_meal_types: bool = False) -> ImportResult:
        """
        Import recipes from a markdown file.

        Args:
            path: File with one or more recipes (.md, .markdown or .txt)
            user_id: Account to import into
            seed_meal_types: Add the default meal types first, so "Typ"
                             values like "Obiad" can be matched

        Returns:
            ImportResult

        Raises:
            ValueError: If the file extension is not supported
            OSError: If the file cannot be read
        """
        file_path = Path(path)
        if file_path.suffix.lower() not in ALLOWED_EXTENSIONS:
            raise ValueError(
                f"Unsupported file type {file_path.suffix!r}, expected one of: "
                f"{', '.join(ALLOWED_EXTENSIONS)}"
            )

        if seed_meal_types:
            self.db.add_missing_default_meal_types(user_id)

        markdown = file_path.read_text(encoding="utf-8")
        logger.info(f"Importing {file_path} for user {user_id}")
        return self.importer.import_markdown(markdown, user_id)

    def list_meals(self, user_id: str):
        """Print the account's meals."""
        meals = self.db.get_meals(user_id)
        if not meals:
            print("Brak zapisanych dań")
            return meals

        for meal in meals:
            print(f"• {meal}")
            for usage in meal.ingredients:
                print(f"    - {usage.amount:g} {usage.unit} {usage.ingredient.name}")
        return meals


def print_import_result(result: ImportResult):
    """Print an import summary the way the import page reports it."""
    if result.imported:
        print(f"✓ Zaimportowano {result.imported} "
              f"{'przepis' if result.imported == 1 else 'przepisów'}")
    for error in result.errors:
        print(f"❌ {error}")


def main(argv: Optional[list] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Meal planner - markdown recipe import")
    parser.add_argument(
        "command",
        choices=["import", "example", "meals"],
        help="Command to run",
    )
    parser.add_argument(
        "file",
        nargs="?",
        help="Markdown file for 'import'",
    )
    parser.add_argument(
        "--user-id",
        type=str,
        default=DEFAULT_USER_ID,
        help=f"Account ID (default: {DEFAULT_USER_ID})",
    )
    parser.add_argument(
        "--db-dir",
        type=str,
        default=DEFAULT_DB_DIR,
        help=f"Database directory (default: {DEFAULT_DB_DIR})",
    )
    parser.add_argument(
        "--seed-meal-types",
        action="store_true",
        help="Add default meal types (Śniadanie, Obiad, ...) before importing",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.environ.get("MEALPLANNER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "example":
        print(EXAMPLE_DOCUMENT)
        return 0

    planner = MealPlanner(db_dir=args.db_dir)

    if args.command == "meals":
        planner.list_meals(args.user_id)
        return 0

    if not args.file:
        print("❌ Error: file required for 'import' command")
        return 2

    try:
        result = planner.import_file(args.file, args.user_id, seed_meal_types=args.seed_meal_types)
    except (ValueError, OSError) as e:
        print(f"❌ Error: {e}")
        return 1

    print_import_result(result)
    return 0 if result.imported else 1


if __name__ == "__main__":
    sys.exit(main())
