#!/usr/bin/env python3
"""
Flask web application for the meal planner.

Exposes the markdown recipe import to the meals page: paste or upload a
document, get back the number of imported recipes and per-recipe errors.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from functools import wraps
from flask import Flask, current_app, request, jsonify, session
from flask_cors import CORS
from dotenv import load_dotenv

from ..data.database import DatabaseInterface
from ..markdown_parser import EXAMPLE_DOCUMENT
from ..recipe_importer import RecipeImporter

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".md", ".markdown", ".txt")

# Initialize Flask app
app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key-change-in-production")
app.config["MEALPLANNER_DB_DIR"] = os.environ.get("MEALPLANNER_DB_DIR", "data")
CORS(app)

# One DatabaseInterface per configured directory
_databases = {}


def setup_logging():
    """Console + rotating file logging."""
    logs_dir = os.environ.get("MEALPLANNER_LOG_DIR", "logs")
    os.makedirs(logs_dir, exist_ok=True)

    logging.basicConfig(
        level=os.environ.get("MEALPLANNER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),  # Console output
            RotatingFileHandler(
                os.path.join(logs_dir, 'app.log'),
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        ]
    )


def get_db() -> DatabaseInterface:
    """Database for the configured directory, created on first use."""
    db_dir = current_app.config["MEALPLANNER_DB_DIR"]
    if db_dir not in _databases:
        _databases[db_dir] = DatabaseInterface(db_dir=db_dir)
    return _databases[db_dir]


def login_required(f):
    """Decorator to require a logged-in account for API routes."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return jsonify({"success": False, "error": "Not logged in"}), 401
        return f(*args, **kwargs)
    return decorated_function


def _read_markdown_from_request():
    """
    Markdown from a multipart "file" upload or a JSON "markdown" field.

    Returns:
        (markdown, error) - exactly one of them is None
    """
    upload = request.files.get('file')
    if upload is not None:
        filename = (upload.filename or "").lower()
        if not filename.endswith(ALLOWED_EXTENSIONS):
            return None, "Obsługiwane formaty: .md, .markdown, .txt"
        try:
            return upload.read().decode('utf-8'), None
        except UnicodeDecodeError:
            return None, "Nie udało się odczytać pliku"

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return None, "Expected a JSON object"
    markdown = data.get('markdown') or ""
    if not isinstance(markdown, str):
        return None, "Field 'markdown' must be a string"
    return markdown, None


@app.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()}), 200


@app.route('/api/meals/import', methods=['POST'])
@login_required
def api_import_meals():
    """Import recipes from a markdown document."""
    markdown, error = _read_markdown_from_request()
    if error:
        return jsonify({"success": False, "error": error}), 400
    if not markdown.strip():
        return jsonify({"success": False, "error": "No markdown provided"}), 400

    user_id = session['user_id']
    try:
        importer = RecipeImporter(get_db())
        result = importer.import_markdown(markdown, user_id)
    except Exception as e:
        logger.error(f"Error importing meals for user {user_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": str(e)}), 500

    return jsonify({
        "success": result.imported > 0,
        "imported": result.imported,
        "errors": result.errors,
    })


@app.route('/api/meals/import/example', methods=['GET'])
def api_import_example():
    """Example document showing the supported format."""
    return jsonify({"markdown": EXAMPLE_DOCUMENT})


@app.route('/api/meals', methods=['GET'])
@login_required
def api_list_meals():
    """List the account's meals with their relations."""
    user_id = session['user_id']
    try:
        meals = get_db().get_meals(user_id)
    except Exception as e:
        logger.error(f"Error listing meals for user {user_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": str(e)}), 500

    return jsonify({"success": True, "meals": [meal.to_dict() for meal in meals]})


def run():
    """Run the development server."""
    setup_logging()
    app.run(
        host=os.environ.get("MEALPLANNER_HOST", "0.0.0.0"),
        port=int(os.environ.get("MEALPLANNER_PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG", "false").lower() == "true",
    )


if __name__ == '__main__':
    run()
