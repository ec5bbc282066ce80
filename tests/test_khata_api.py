def test_list_khatas_creates_default(client):
    """The first listing creates the main account book"""
    response = client.get("/api/v1/khatas")

    assert response.status_code == 200
    khatas = response.json()["khatas"]
    assert len(khatas) == 1
    assert khatas[0]["name"] == "Main Account Book"
    assert khatas[0]["description"] == "Primary business khata"


def test_create_and_get_khata(client):
    # Act
    created = client.post("/api/v1/khatas", json={"name": "Dyeing", "description": "Dyeing unit"})
    fetched = client.get(f"/api/v1/khatas/{created.json()['id']}")

    # Assert
    assert created.status_code == 201
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Dyeing"
    assert fetched.json()["description"] == "Dyeing unit"


def test_create_khata_requires_name(client):
    response = client.post("/api/v1/khatas", json={"name": "   "})

    assert response.status_code == 400
    assert "name" in response.json()["message"]


def test_get_unknown_khata(client, make_entry):
    entry = make_entry()

    # Only KHATA rows are khatas
    response = client.get(f"/api/v1/khatas/{entry.id}")

    assert response.status_code == 404
    assert response.json()["error"] == "khata_not_found"
