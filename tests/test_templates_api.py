from fastapi import status


def _create(client, headers, **overrides):
    payload = {
        "name": "Annual",
        "description": "Yearly review",
        "fields": [
            {"label": "Goals", "field_type": "textarea", "is_required": True},
            {"label": "Rating", "field_type": "rating"},
        ],
    }
    payload.update(overrides)
    response = client.post("/api/templates", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_create_template_with_ordered_fields(client, auth_headers):
    template = _create(client, auth_headers)
    assert template["name"] == "Annual"
    assert [(f["label"], f["position"]) for f in template["fields"]] == [("Goals", 0), ("Rating", 1)]
    assert template["fields"][0]["is_required"] is True


def test_list_templates(client, auth_headers):
    _create(client, auth_headers, name="Quarterly", fields=[])
    _create(client, auth_headers, name="Annual")
    response = client.get("/api/templates", headers=auth_headers)
    assert [t["name"] for t in response.json()] == ["Annual", "Quarterly"]


def test_update_template_replaces_fields(client, auth_headers):
    template = _create(client, auth_headers)
    response = client.patch(f"/api/templates/{template['id']}", json={
        "name": "Annual v2",
        "fields": [{"label": "Impact"}],
    }, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Annual v2"
    assert [f["label"] for f in data["fields"]] == ["Impact"]


def test_update_template_without_fields_keeps_them(client, auth_headers):
    template = _create(client, auth_headers)
    response = client.patch(f"/api/templates/{template['id']}", json={"description": "Edited"}, headers=auth_headers)
    assert response.json()["description"] == "Edited"
    assert len(response.json()["fields"]) == 2


def test_delete_template(client, auth_headers):
    template = _create(client, auth_headers)
    assert client.delete(f"/api/templates/{template['id']}", headers=auth_headers).status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/templates/{template['id']}", headers=auth_headers).status_code == status.HTTP_404_NOT_FOUND
