def test_update_inventory_item(client, auth_headers):
    response = client.patch(
        "/inventory/item-1",
        json={"changes": {"quantity": 80}},
        headers=auth_headers("pharmacist-1"),
    )

    assert response.status_code == 200
    assert response.json()["quantity"] == 80


def test_update_rejects_non_editable_fields(client, auth_headers):
    response = client.patch(
        "/inventory/item-1",
        json={"changes": {"tenant_id": "t-2"}},
        headers=auth_headers("pharmacist-1"),
    )

    assert response.status_code == 400
    assert "tenant_id" in response.json()["detail"]


def test_customer_cannot_update_inventory(client, auth_headers):
    response = client.patch(
        "/inventory/item-1",
        json={"changes": {"quantity": 1}},
        headers=auth_headers("customer-1"),
    )

    assert response.status_code == 403


def test_item_of_other_tenant_is_not_found(client, auth_headers):
    response = client.patch(
        "/inventory/item-2",
        json={"changes": {"quantity": 1}},
        headers=auth_headers("pharmacist-1"),
    )

    assert response.status_code == 404


def test_bulk_update(client, auth_headers):
    response = client.patch(
        "/inventory/bulk",
        json={"updates": [{"id": "item-1", "changes": {"price": 3.5}}]},
        headers=auth_headers("admin-1"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["updated"] == 1
    assert body["items"][0]["price"] == 3.5


def test_bulk_update_requires_updates(client, auth_headers):
    response = client.patch(
        "/inventory/bulk", json={"updates": []}, headers=auth_headers("admin-1")
    )

    assert response.status_code == 422
