from farm_app.changes import ALL_TABLES, ChangeEvent, feed


def test_subscribe_receives_row_changes(client):
    seen: list[ChangeEvent] = []
    unsubscribe = feed.subscribe("inventory", seen.append)
    try:
        item = client.post("/inventory/", json={"item_name": "Hay", "category": "feed", "quantity": 3}).json()
        client.patch(f"/inventory/{item['id']}", json={"quantity": 2})
        client.delete(f"/inventory/{item['id']}")
    finally:
        unsubscribe()

    assert [e.event for e in seen] == ["INSERT", "UPDATE", "DELETE"]
    assert all(e.table == "inventory" and e.row_id == item["id"] for e in seen)


def test_unsubscribe_stops_delivery(client):
    seen = []
    unsubscribe = feed.subscribe("tasks", seen.append)
    unsubscribe()

    client.post("/tasks/", json={"title": "Fix fence", "task_type": "maintenance", "task_date": "2026-05-01"})
    assert seen == []


def test_wildcard_subscription_and_failing_callback(client):
    seen = []

    def broken(change):
        raise RuntimeError("subscriber bug")

    unsub_broken = feed.subscribe(ALL_TABLES, broken)
    unsub_all = feed.subscribe(ALL_TABLES, seen.append)
    try:
        r = client.post("/crops/", json={"name": "Kale", "type": "vegetable", "farm_location": "Greenhouse"})
        assert r.status_code == 200, r.text
    finally:
        unsub_broken()
        unsub_all()

    assert ("crops", "INSERT") in [(e.table, e.event) for e in seen]
