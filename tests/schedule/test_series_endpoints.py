from datetime import timedelta

from gymschedule.core.date_utils import get_today_in_gym_timezone
from gymschedule.models.schedule import ClassInstance, ClassInstanceStatus

API = "/api/v1/schedule"

SERIES_DATA = {
    "title": "Zumba Kids",
    "weekday": 3,
    "start_time": "17:00",
    "end_time": "18:00",
    "category": "child",
    "class_type": "group",
    "instructor": "Ana López",
    "max_capacity": 20,
    "period_start": "2024-01-01",
}


def _create_series(client, **overrides):
    data = dict(SERIES_DATA, **overrides)
    response = client.post(f"{API}/series", json=data)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_get_series(client):
    created = _create_series(client)

    assert created["title"] == "Zumba Kids"
    assert created["start_time"] == "17:00:00"
    assert created["active"] is True
    assert created["period_end"] is None

    response = client.get(f"{API}/series/{created['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


def test_create_series_invalid_times(client):
    response = client.post(f"{API}/series", json=dict(SERIES_DATA, start_time="18:00", end_time="17:00"))
    assert response.status_code == 422


def test_create_series_invalid_weekday(client):
    response = client.post(f"{API}/series", json=dict(SERIES_DATA, weekday=7))
    assert response.status_code == 422


def test_get_missing_series(client):
    response = client.get(f"{API}/series/9999")
    assert response.status_code == 404


def test_list_series(client):
    _create_series(client, weekday=5)
    _create_series(client, weekday=1, category="adult")

    response = client.get(f"{API}/series")
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [s["weekday"] for s in body["data"]] == [1, 5]

    response = client.get(f"{API}/series", params={"category": "child"})
    assert response.json()["count"] == 1


def test_patch_series(client):
    created = _create_series(client)

    response = client.patch(f"{API}/series/{created['id']}", json={"max_capacity": 25})
    assert response.status_code == 200
    assert response.json()["max_capacity"] == 25

    response = client.patch(f"{API}/series/{created['id']}", json={"end_time": "16:00"})
    assert response.status_code == 400


def test_delete_series_retires_it(client, db):
    created = _create_series(client)
    today = get_today_in_gym_timezone("UTC")

    response = client.delete(f"{API}/series/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    series = client.get(f"{API}/series/{created['id']}").json()
    assert series["active"] is False
    assert series["period_end"] == today.isoformat()


def test_delete_series_cancel_future(client, db, make_instance):
    created = _create_series(client)
    today = get_today_in_gym_timezone("UTC")
    future = make_instance(series_id=created["id"], date=today + timedelta(days=2))

    response = client.delete(f"{API}/series/{created['id']}", params={"cancel_future": True})
    assert response.status_code == 200

    db.refresh(future)
    assert future.status == ClassInstanceStatus.CANCELED


def test_delete_missing_series(client):
    response = client.delete(f"{API}/series/9999")
    assert response.status_code == 404


def test_generate_endpoint(client, db):
    created = _create_series(client)

    payload = {"window_start": "2024-01-01", "window_end": "2024-01-31"}
    response = client.post(f"{API}/series/generate", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body == {
        "created": 5,
        "existing": 0,
        "series_processed": 1,
        "period": {"window_start": "2024-01-01", "window_end": "2024-01-31"},
    }

    # Repetir con GET no crea nada nuevo
    response = client.get(f"{API}/series/generate", params=payload)
    assert response.status_code == 200
    assert response.json()["created"] == 0
    assert response.json()["existing"] == 5

    count = db.query(ClassInstance).filter(ClassInstance.series_id == created["id"]).count()
    assert count == 5


def test_generate_invalid_window(client):
    response = client.post(
        f"{API}/series/generate",
        json={"window_start": "2024-01-31", "window_end": "2024-01-01"},
    )
    assert response.status_code == 400


def test_generate_unparsable_body(client):
    response = client.post(f"{API}/series/generate", json={"window_start": "no-es-fecha"})
    assert response.status_code == 422


def test_generate_default_window(client):
    today = get_today_in_gym_timezone("UTC")
    _create_series(client, period_start=today.isoformat())

    response = client.post(f"{API}/series/generate")
    assert response.status_code == 200
    body = response.json()
    assert body["period"]["window_start"] == today.isoformat()
    assert body["period"]["window_end"] == (today + timedelta(days=35)).isoformat()
    # 36 días contienen 5 o 6 miércoles
    assert body["created"] in (5, 6)


def test_generate_single_series_via_query(client):
    first = _create_series(client, weekday=1)
    _create_series(client, weekday=2)

    response = client.get(
        f"{API}/series/generate",
        params={"window_start": "2024-01-01", "window_end": "2024-01-31", "series_id": first["id"]},
    )
    assert response.status_code == 200
    assert response.json()["series_processed"] == 1


def test_generate_fills_only_missing_window_end(client):
    today = get_today_in_gym_timezone("UTC")
    _create_series(client)

    response = client.post(f"{API}/series/generate", json={"window_start": "2024-01-01"})
    assert response.status_code == 200
    period = response.json()["period"]
    assert period["window_start"] == "2024-01-01"
    assert period["window_end"] == (today + timedelta(days=35)).isoformat()


def test_generate_fills_only_missing_window_start(client):
    today = get_today_in_gym_timezone("UTC")
    window_end = (today + timedelta(days=10)).isoformat()

    response = client.get(f"{API}/series/generate", params={"window_end": window_end})
    assert response.status_code == 200
    period = response.json()["period"]
    assert period["window_start"] == today.isoformat()
    assert period["window_end"] == window_end


def test_generate_window_end_before_default_start(client):
    # El límite enviado se respeta aunque deje la ventana invertida
    response = client.post(f"{API}/series/generate", json={"window_end": "2024-01-31"})
    assert response.status_code == 400
