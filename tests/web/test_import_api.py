"""
Tests for the markdown import endpoints.

Uses the Flask test client against a temporary database directory.
"""

import io

import pytest

from mealplanner.data.database import DatabaseInterface
from mealplanner.recipe_importer import NO_RECIPES_ERROR
from mealplanner.web.app import app


class TestImportApi:
    """Test /api/meals/import and its companions."""

    @pytest.fixture
    def client(self, temp_db_dir):
        """Flask test client bound to a temporary database."""
        app.config['TESTING'] = True
        app.config['SECRET_KEY'] = 'test_secret_key'
        app.config['MEALPLANNER_DB_DIR'] = temp_db_dir
        with app.test_client() as client:
            yield client

    @pytest.fixture
    def authenticated_client(self, client, user_id):
        """Client with a logged-in account."""
        with client.session_transaction() as sess:
            sess['user_id'] = user_id
        return client

    def test_requires_login(self, client):
        response = client.post('/api/meals/import', json={'markdown': '# A'})

        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_import_json_body(self, authenticated_client, temp_db_dir, user_id, bolognese_markdown):
        response = authenticated_client.post('/api/meals/import', json={'markdown': bolognese_markdown})

        assert response.status_code == 200
        data = response.get_json()
        assert data == {"success": True, "imported": 1, "errors": []}

        meals = DatabaseInterface(db_dir=temp_db_dir).get_meals(user_id)
        assert [meal.name for meal in meals] == ["Spaghetti Bolognese"]

    def test_import_uploaded_file(self, authenticated_client, three_recipes_markdown):
        response = authenticated_client.post(
            '/api/meals/import',
            data={'file': (io.BytesIO(three_recipes_markdown.encode('utf-8')), 'przepisy.md')},
            content_type='multipart/form-data',
        )

        assert response.status_code == 200
        assert response.get_json()['imported'] == 3

    def test_upload_wrong_extension(self, authenticated_client):
        response = authenticated_client.post(
            '/api/meals/import',
            data={'file': (io.BytesIO(b'# A'), 'przepisy.pdf')},
            content_type='multipart/form-data',
        )

        assert response.status_code == 400
        assert "Obsługiwane formaty" in response.get_json()['error']

    def test_upload_not_utf8(self, authenticated_client):
        response = authenticated_client.post(
            '/api/meals/import',
            data={'file': (io.BytesIO(b'# \xff\xfe'), 'przepisy.txt')},
            content_type='multipart/form-data',
        )

        assert response.status_code == 400

    def test_empty_markdown(self, authenticated_client):
        response = authenticated_client.post('/api/meals/import', json={'markdown': '   '})

        assert response.status_code == 400
        assert response.get_json()['error'] == "No markdown provided"

    @pytest.mark.parametrize("body", [
        {'markdown': 5},
        {'markdown': ['# A']},
        ['# A'],
        "# A",
    ])
    def test_malformed_json_body(self, authenticated_client, body):
        """Non-object bodies and non-string markdown get a JSON 400."""
        response = authenticated_client.post('/api/meals/import', json=body)

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_no_recipes_in_document(self, authenticated_client):
        """A document without titles is a normal result, not an HTTP error."""
        response = authenticated_client.post('/api/meals/import', json={'markdown': 'tylko tekst'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is False
        assert data['imported'] == 0
        assert data['errors'] == [NO_RECIPES_ERROR]

    def test_example_document_imports(self, authenticated_client):
        """The example served to users is itself importable."""
        example = authenticated_client.get('/api/meals/import/example').get_json()['markdown']

        response = authenticated_client.post('/api/meals/import', json={'markdown': example})

        assert response.get_json()['imported'] == 2

    def test_list_meals(self, authenticated_client, bolognese_markdown):
        authenticated_client.post('/api/meals/import', json={'markdown': bolognese_markdown})

        response = authenticated_client.get('/api/meals')

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert len(data['meals']) == 1
        meal = data['meals'][0]
        assert meal['servings'] == 4
        assert len(meal['ingredients']) == 6
        assert meal['is_child_friendly'] is True

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == "healthy"
