import pytest


class TestSpeciesApi:
    """Test the JSON species endpoints."""

    def test_requires_login(self, client):
        """Should return 401 to anonymous callers."""
        assert client.get("/api/species").status_code == 401
        response = client.post("/api/species/validate", json={"field": "image", "value": "x"})
        assert response.status_code == 401

    def test_list_and_get(self, authenticated_client, create_species):
        """Should return stored species."""
        species_id = create_species(authenticated_client)

        listing = authenticated_client.get("/api/species", params={"q": "wolf"}).json()
        detail = authenticated_client.get(f"/api/species/{species_id}").json()

        assert listing["count"] == 1
        assert listing["query"] == "wolf"
        assert detail["scientific_name"] == "Canis lupus"
        assert detail["kingdom"] == "Animalia"
        assert detail["endangered"] is False
        assert detail["total_population"] == 250000

    def test_get_missing(self, authenticated_client):
        """Should return 404."""
        assert authenticated_client.get("/api/species/42").status_code == 404


class TestValidateEndpoint:
    """Test per-field validation used while typing."""

    @pytest.mark.parametrize(
        "field,value,expected",
        [
            ("total_population", "1200", 1200),
            ("total_population", "", None),
            ("endangered", "T", True),
            ("endangered", "D", None),
            ("scientific_name", "  Canis lupus  ", "Canis lupus"),
        ],
    )
    def test_valid_values(self, authenticated_client, field, value, expected):
        """Should return the normalized value."""
        response = authenticated_client.post(
            "/api/species/validate", json={"field": field, "value": value}
        )

        assert response.json() == {"field": field, "valid": True, "value": expected, "error": None}

    @pytest.mark.parametrize(
        "field,value,error",
        [
            ("image", "not a url", "Invalid url"),
            ("scientific_name", "", "Scientific name is required"),
            ("total_population", "0", "Input should be greater than or equal to 1"),
        ],
    )
    def test_invalid_values(self, authenticated_client, field, value, error):
        """Should report the field error."""
        body = authenticated_client.post(
            "/api/species/validate", json={"field": field, "value": value}
        ).json()

        assert body["valid"] is False
        assert body["error"] == error

    def test_unknown_field(self, authenticated_client):
        """Should return 422 for fields that are not editable."""
        response = authenticated_client.post(
            "/api/species/validate", json={"field": "author", "value": "me"}
        )

        assert response.status_code == 422
