from datetime import date, timedelta


def new_fine(**overrides):
    payload = {
        "offender_name": "John Doe",
        "offence_type": "Speeding",
        "fine_amount": 100.0,
        "date_issued": date.today().isoformat(),
    }
    payload.update(overrides)
    return payload


def days_ago(days: int) -> str:
    return (date.today() - timedelta(days=days)).isoformat()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_fine(client):
    response = client.post("/fines", json=new_fine())

    assert response.status_code == 201
    body = response.json()
    assert body["fine_id"] > 0
    assert body["offender_name"] == "John Doe"
    assert body["offence_type"] == "Speeding"
    assert body["fine_amount"] == 100.0
    assert body["date_issued"] == date.today().isoformat()
    assert body["status"] == "unpaid"


def test_create_fine_with_explicit_status(client):
    response = client.post("/fines", json=new_fine(status="overdue"))

    assert response.status_code == 201
    assert response.json()["status"] == "overdue"


def test_create_fine_missing_field(client):
    payload = new_fine()
    del payload["offence_type"]

    response = client.post("/fines", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing field: offence_type"}


def test_create_fine_reports_first_missing_field(client):
    response = client.post("/fines", json={"fine_amount": 10})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing field: offender_name"}


def test_create_fine_null_counts_as_missing(client):
    response = client.post("/fines", json=new_fine(date_issued=None))

    assert response.status_code == 400
    assert response.json() == {"error": "Missing field: date_issued"}


def test_create_fine_null_status_defaults_to_unpaid(client):
    response = client.post("/fines", json=new_fine(status=None))

    assert response.status_code == 201
    assert response.json()["status"] == "unpaid"


def test_surcharged_amount_is_rounded(client):
    for _ in range(3):
        client.post("/fines", json=new_fine(offender_name="R", fine_amount=10.333))

    response = client.post("/fines", json=new_fine(offender_name="R", fine_amount=10.333))

    assert response.json()["fine_amount"] == 60.33


def test_create_fine_invalid_status(client):
    response = client.post("/fines", json=new_fine(status="cancelled"))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid field: status"}


def test_create_fine_body_must_be_an_object(client):
    response = client.post("/fines", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_created_ids_are_unique(client):
    ids = {client.post("/fines", json=new_fine()).json()["fine_id"] for _ in range(3)}

    assert len(ids) == 3


def test_fourth_unpaid_fine_gets_surcharge(client):
    for _ in range(3):
        client.post("/fines", json=new_fine(offender_name="Repeat Offender"))

    response = client.post("/fines", json=new_fine(offender_name="Repeat Offender"))

    assert response.json()["fine_amount"] == 150.0


def test_get_fine(client):
    created = client.post("/fines", json=new_fine()).json()

    response = client.get(f"/fines/{created['fine_id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_unknown_fine(client):
    response = client.get("/fines/999999")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_non_numeric_id_is_not_found(client):
    response = client.get("/fines/abc")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_list_fines_envelope_and_order(client):
    first = client.post("/fines", json=new_fine()).json()
    second = client.post("/fines", json=new_fine()).json()

    response = client.get("/fines")

    assert response.status_code == 200
    body = response.json()
    assert body["limit"] == 50
    assert body["offset"] == 0
    assert [fine["fine_id"] for fine in body["data"]] == [second["fine_id"], first["fine_id"]]


def test_list_fines_clamps_pagination(client):
    response = client.get("/fines", params={"limit": 1000, "offset": -3})

    assert response.json()["limit"] == 100
    assert response.json()["offset"] == 0

    response = client.get("/fines", params={"limit": 0})

    assert response.json()["limit"] == 1


def test_list_fines_treats_empty_pagination_as_zero(client):
    response = client.get("/fines?limit=&offset=")

    assert response.status_code == 200
    assert response.json()["limit"] == 1
    assert response.json()["offset"] == 0


def test_list_fines_reads_non_numeric_limit_as_zero(client):
    response = client.get("/fines", params={"limit": "many", "offset": "2abc"})

    assert response.status_code == 200
    assert response.json()["limit"] == 1
    assert response.json()["offset"] == 2


def test_old_fine_becomes_overdue_on_list(client):
    created = client.post("/fines", json=new_fine(date_issued=days_ago(35))).json()
    assert created["status"] == "unpaid"
    assert created["fine_amount"] == 100.0

    fines = client.get("/fines").json()["data"]

    assert fines[0]["fine_id"] == created["fine_id"]
    assert fines[0]["status"] == "overdue"
    assert fines[0]["fine_amount"] == 120.0

    # A second read does not compound the penalty.
    again = client.get(f"/fines/{created['fine_id']}").json()
    assert again["fine_amount"] == 120.0


def test_replace_fine(client):
    fine_id = client.post("/fines", json=new_fine()).json()["fine_id"]
    replacement = new_fine(offender_name="Jane Roe", fine_amount=42.5, date_issued="2025-01-01", status="paid")

    response = client.put(f"/fines/{fine_id}", json=replacement)

    assert response.status_code == 200
    assert response.json() == {"fine_id": fine_id, **replacement}


def test_replace_requires_status(client):
    fine_id = client.post("/fines", json=new_fine()).json()["fine_id"]

    response = client.put(f"/fines/{fine_id}", json=new_fine())

    assert response.status_code == 400
    assert response.json() == {"error": "Missing field: status"}


def test_replace_unknown_fine(client):
    response = client.put("/fines/999999", json=new_fine(status="unpaid"))

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_patch_fine(client):
    created = client.post("/fines", json=new_fine()).json()

    response = client.patch(f"/fines/{created['fine_id']}", json={"offence_type": "Parking", "colour": "red"})

    assert response.status_code == 200
    assert response.json() == {**created, "offence_type": "Parking"}


def test_patch_without_known_fields(client):
    fine_id = client.post("/fines", json=new_fine()).json()["fine_id"]

    response = client.patch(f"/fines/{fine_id}", json={"colour": "red"})

    assert response.status_code == 400
    assert response.json() == {"error": "No fields to update"}


def test_patch_without_body(client):
    fine_id = client.post("/fines", json=new_fine()).json()["fine_id"]

    response = client.patch(f"/fines/{fine_id}")

    assert response.status_code == 400
    assert response.json() == {"error": "No fields to update"}


def test_patch_unknown_fine(client):
    response = client.patch("/fines/999999", json={"fine_amount": 5})

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_delete_fine(client):
    fine_id = client.post("/fines", json=new_fine()).json()["fine_id"]

    response = client.delete(f"/fines/{fine_id}")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get(f"/fines/{fine_id}").status_code == 404
    assert client.delete(f"/fines/{fine_id}").json() == {"error": "Not found"}


def test_pay_same_day_then_pay_again(client):
    fine_id = client.post("/fines", json=new_fine(fine_amount=100.0)).json()["fine_id"]

    response = client.patch(f"/fines/{fine_id}/paid")

    assert response.status_code == 204
    assert response.content == b""
    fine = client.get(f"/fines/{fine_id}").json()
    assert fine["status"] == "paid"
    assert fine["fine_amount"] == 90.0

    response = client.patch(f"/fines/{fine_id}/paid")

    assert response.status_code == 409
    assert response.json() == {"error": "Fine already paid"}
    assert client.get(f"/fines/{fine_id}").json()["fine_amount"] == 90.0


def test_pay_late_keeps_amount(client):
    fine_id = client.post("/fines", json=new_fine(date_issued=days_ago(20))).json()["fine_id"]

    assert client.patch(f"/fines/{fine_id}/paid").status_code == 204

    assert client.get(f"/fines/{fine_id}").json()["fine_amount"] == 100.0


def test_pay_unknown_fine(client):
    response = client.patch("/fines/999999/paid")

    assert response.status_code == 404
    assert response.json() == {"error": "Fine not found"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nothing-here")

    assert response.status_code == 404
    assert "error" in response.json()
