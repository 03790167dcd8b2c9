from fastapi import status


def test_upsert_list_and_delete_override(client, org, make_period, auth_headers):
    period = make_period()
    manager = auth_headers(org.dept_head, "MANAGER")
    payload = {"employee_id": org.alice.id, "evaluator_id": org.dept_head.id, "period_id": period.id}

    created = client.post("/api/evaluation/overrides", headers=manager, json=payload)
    assert created.status_code == status.HTTP_200_OK

    # Same (employee, period) updates in place
    updated = client.post(
        "/api/evaluation/overrides", headers=manager, json={**payload, "evaluator_id": org.ceo.id}
    )
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["evaluator_id"] == org.ceo.id

    listing = client.get("/api/evaluation/overrides", params={"period_id": period.id}, headers=manager).json()
    assert len(listing) == 1

    response = client.delete(f"/api/evaluation/overrides/{created.json()['id']}", headers=manager)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/evaluation/overrides", headers=manager).json() == []


def test_self_override_is_rejected(client, org, auth_headers):
    response = client.post(
        "/api/evaluation/overrides",
        headers=auth_headers(org.ceo),
        json={"employee_id": org.alice.id, "evaluator_id": org.alice.id},
    )
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "VALIDATION_ERROR"


def test_inverted_effective_range_is_rejected(client, org, auth_headers):
    response = client.post(
        "/api/evaluation/overrides",
        headers=auth_headers(org.ceo),
        json={
            "employee_id": org.alice.id,
            "evaluator_id": org.bob.id,
            "effective_from": "2025-06-01",
            "effective_to": "2025-01-01",
        },
    )
    assert response.status_code == 422


def test_unknown_evaluator_is_404(client, org, auth_headers):
    response = client.post(
        "/api/evaluation/overrides",
        headers=auth_headers(org.ceo),
        json={"employee_id": org.alice.id, "evaluator_id": 99999},
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_employees_cannot_manage_overrides(client, org, auth_headers):
    response = client.get("/api/evaluation/overrides", headers=auth_headers(org.alice, "EMPLOYEE"))
    assert response.status_code == status.HTTP_403_FORBIDDEN
