from datetime import datetime, timezone

import pytest

from farm_app import models
from farm_app.routers import functions as functions_router
from farm_app.services.bulk_update import chunked
from farm_app.services.inventory_alerts import flag_location, is_critical, is_low_stock


def _add_sale(client, total, status, sale_date="2026-01-10", product_type="dairy"):
    r = client.post(
        "/sales/",
        json={
            "product_name": "Milk",
            "product_type": product_type,
            "buyer": "Brookside",
            "quantity": 1,
            "unit_price": total,
            "sale_date": sale_date,
            "payment_status": status,
        },
    )
    assert r.status_code == 200, r.text
    return r.json()


def _add_purchase(client, total, status, purchase_date="2026-01-12", category="dairy"):
    r = client.post(
        "/purchases/",
        json={
            "item_name": "Dairy meal",
            "category": category,
            "supplier": "Unga",
            "quantity": 1,
            "unit_cost": total,
            "purchase_date": purchase_date,
            "payment_status": status,
        },
    )
    assert r.status_code == 200, r.text
    return r.json()


def _add_item(db, name, quantity, min_threshold=None, unit_cost=None, location="Store 1"):
    item = models.InventoryItem(
        item_name=name,
        category="feed",
        quantity=quantity,
        min_threshold=min_threshold,
        unit_cost=unit_cost,
        location=location,
        created_by="test",
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


# -----------------------------
# Profit & loss
# -----------------------------

def test_profit_loss_totals(client):
    _add_sale(client, 100, "paid")
    _add_sale(client, 50, "pending")
    _add_purchase(client, 40, "paid")

    r = client.post("/functions/calculate-profit-loss", json={"user_id": "u1"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True

    summary = body["profit_loss_report"]["summary"]
    assert summary["total_revenue"] == 150
    assert summary["paid_revenue"] == 100
    assert summary["total_costs"] == 40
    assert summary["paid_costs"] == 40
    assert summary["gross_profit"] == 110
    assert summary["net_profit"] == 60
    assert summary["profit_margin_percent"] == pytest.approx(73.333, abs=0.01)
    assert summary["category"] == "All Categories"
    assert summary["total_sales_transactions"] == 2
    assert body["profit_loss_report"]["generated_by"] == "u1"


def test_profit_loss_margin_is_zero_without_revenue(client):
    _add_purchase(client, 40, "paid")

    r = client.post("/functions/calculate-profit-loss", json={})
    summary = r.json()["profit_loss_report"]["summary"]
    assert summary["total_revenue"] == 0
    assert summary["gross_profit"] == -40
    assert summary["profit_margin_percent"] == 0


def test_profit_loss_monthly_trends_include_one_sided_months(client):
    _add_sale(client, 100, "paid", sale_date="2026-03-05")
    _add_purchase(client, 30, "paid", purchase_date="2026-01-20")
    _add_sale(client, 20, "paid", sale_date="2026-01-02")

    r = client.post("/functions/calculate-profit-loss", json={})
    trends = r.json()["profit_loss_report"]["monthly_trends"]
    assert [t["month"] for t in trends] == ["2026-01", "2026-03"]
    assert trends[0] == {
        "month": "2026-01",
        "revenue": 20,
        "costs": 30,
        "profit": -10,
        "sales_count": 1,
        "purchases_count": 1,
    }
    assert trends[1]["purchases_count"] == 0


def _backdate(db, model, row_id, when):
    db.get(model, row_id).created_at = when
    db.commit()


def test_profit_loss_window_uses_entry_time_and_category(client, db):
    old = _add_sale(client, 100, "paid", sale_date="2026-02-10", product_type="dairy")
    _add_sale(client, 70, "paid", sale_date="2026-01-10", product_type="dairy")
    _add_sale(client, 500, "paid", sale_date="2026-02-11", product_type="cereal")
    _add_purchase(client, 10, "paid", purchase_date="2026-02-01", category="dairy")
    stale = _add_purchase(client, 99, "paid", purchase_date="2026-02-01", category="dairy")
    _backdate(db, models.Sale, old["id"], datetime(2026, 1, 31, 23, 0))
    _backdate(db, models.Purchase, stale["id"], datetime(2025, 12, 1))

    today = datetime.now(timezone.utc).date()
    r = client.post(
        "/functions/calculate-profit-loss",
        json={"start_date": "2026-02-01", "end_date": today.isoformat(), "category": "dairy"},
    )
    report = r.json()["profit_loss_report"]
    assert report["summary"]["total_revenue"] == 70
    assert report["summary"]["total_costs"] == 10
    assert report["summary"]["category"] == "dairy"
    assert report["summary"]["period"] == {"start_date": "2026-02-01", "end_date": today.isoformat()}
    # buckets still follow the transaction dates
    assert [t["month"] for t in report["monthly_trends"]] == ["2026-01", "2026-02"]


def test_profit_loss_end_date_covers_the_whole_day(client):
    # entered today, sold back in January
    _add_sale(client, 20, "paid", sale_date="2026-01-10")
    today = datetime.now(timezone.utc).date().isoformat()

    r = client.post(
        "/functions/calculate-profit-loss",
        json={"start_date": today, "end_date": today},
    )
    assert r.status_code == 200, r.text
    summary = r.json()["profit_loss_report"]["summary"]
    assert summary["total_revenue"] == 20
    assert summary["total_sales_transactions"] == 1


def test_profit_loss_category_leaderboard(client):
    _add_sale(client, 100, "paid", product_type="dairy")
    _add_sale(client, 50, "paid", product_type="dairy")
    _add_sale(client, 400, "pending", product_type="cereal")

    r = client.post("/functions/calculate-profit-loss", json={})
    perf = r.json()["profit_loss_report"]["category_performance"]
    assert [p["category"] for p in perf] == ["cereal", "dairy"]
    assert perf[1]["transactions"] == 2
    assert perf[1]["avg_transaction_value"] == 75


def test_profit_loss_bad_window_is_400(client):
    r = client.post(
        "/functions/calculate-profit-loss",
        json={"start_date": "2026-03-01", "end_date": "2026-01-01"},
    )
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_unhandled_error_is_500_envelope(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(functions_router, "calculate_profit_loss", boom)
    r = client.post("/functions/calculate-profit-loss", json={})
    assert r.status_code == 500
    assert r.json() == {"error": "store unavailable", "success": False}


# -----------------------------
# Inventory alerts
# -----------------------------

def test_low_stock_and_critical_boundaries():
    assert is_low_stock(2, 10) and is_critical(2, 10)
    assert is_low_stock(5, 10) and not is_critical(5, 10)
    assert is_low_stock(10, 10)
    assert not is_low_stock(11, 10)
    # no threshold: only an empty bin counts as low, and never critical
    assert is_low_stock(0, None) and not is_critical(0, None)
    assert not is_low_stock(3, None)


def test_flag_location_is_idempotent():
    assert flag_location("Store 1") == "Store 1 [CRITICAL]"
    assert flag_location("Store 1 [CRITICAL]") == "Store 1 [CRITICAL]"
    assert flag_location("Barn [CRITICAL] east") == "Barn [CRITICAL] east"
    assert flag_location(None) == "[CRITICAL]"


def test_inventory_alerts_flags_critical_items_once(client, db):
    critical = _add_item(db, "Layers mash", 2, min_threshold=10)
    low = _add_item(db, "CAN", 5, min_threshold=10, location="Store 2")
    _add_item(db, "DAP", 25, min_threshold=8)
    _add_item(db, "Seed", 3)

    r = client.post("/functions/inventory-alerts")
    assert r.status_code == 200, r.text
    summary = r.json()["alert_summary"]
    assert summary["total_low_stock"] == 2
    assert summary["critical_items"] == 1
    flags = {i["item_name"]: i["is_critical"] for i in summary["low_stock_items"]}
    assert flags == {"Layers mash": True, "CAN": False}

    # running again must not stack the marker
    client.post("/functions/inventory-alerts")

    db.expire_all()
    assert db.get(models.InventoryItem, critical.id).location == "Store 1 [CRITICAL]"
    assert db.get(models.InventoryItem, low.id).location == "Store 2"


# -----------------------------
# Bulk inventory update
# -----------------------------

def test_chunked_splits_sixty_into_fifty_and_ten():
    sizes = [len(b) for b in chunked(list(range(60)), 50)]
    assert sizes == [50, 10]


def test_bulk_update_applies_all_batches(client, db, make_profile):
    make_profile("staff-user", "staff")
    items = [_add_item(db, f"Item {n}", 1, min_threshold=5, unit_cost=10) for n in range(60)]

    updates = [{"id": i.id, "quantity": 20} for i in items]
    updates[0]["location"] = "Store 9"

    r = client.post(
        "/functions/bulk-inventory-update",
        json={"updates": updates, "user_id": "staff-user"},
    )
    assert r.status_code == 200, r.text
    results = r.json()["results"]
    assert results["successful_updates"] == 60
    assert results["failed_updates"] == 0
    assert results["batches"] == 2
    assert results["total_inventory_value"] == 60 * 20 * 10
    assert results["low_stock_items"] == 0
    assert "errors" not in results

    db.expire_all()
    first = db.get(models.InventoryItem, items[0].id)
    assert first.quantity == 20
    assert first.location == "Store 9"


def test_bulk_update_records_item_failures(client, db, admin):
    item = _add_item(db, "Hay", 1, min_threshold=5, unit_cost=100)

    r = client.post(
        "/functions/bulk-inventory-update",
        json={
            "updates": [{"id": item.id, "quantity": 3}, {"id": 99999, "quantity": 1}, {"quantity": 4}],
            "user_id": admin.user_id,
        },
    )
    assert r.status_code == 200, r.text
    results = r.json()["results"]
    assert results["successful_updates"] == 1
    assert results["failed_updates"] == 2
    assert results["low_stock_items"] == 1
    assert results["total_inventory_value"] == 300
    missing = [e for e in results["errors"] if e["id"] == 99999]
    assert missing and "not found" in missing[0]["error"]


def test_bulk_update_rejects_farmer_without_changes(client, db, make_profile):
    make_profile("farmer-user", "farmer")
    item = _add_item(db, "Hay", 1)

    r = client.post(
        "/functions/bulk-inventory-update",
        json={"updates": [{"id": item.id, "quantity": 50}], "user_id": "farmer-user"},
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Insufficient permissions for bulk updates", "success": False}

    db.expire_all()
    assert db.get(models.InventoryItem, item.id).quantity == 1


def test_bulk_update_rejects_unknown_user(client, db):
    item = _add_item(db, "Hay", 1)
    r = client.post(
        "/functions/bulk-inventory-update",
        json={"updates": [{"id": item.id, "quantity": 50}]},
    )
    assert r.status_code == 403
    assert r.json()["success"] is False

    db.expire_all()
    assert db.get(models.InventoryItem, item.id).quantity == 1


@pytest.mark.parametrize("body", [{}, {"updates": "nope"}, {"updates": None}])
def test_bulk_update_requires_updates_array(client, admin, body):
    body = dict(body, user_id=admin.user_id)
    r = client.post("/functions/bulk-inventory-update", json=body)
    assert r.status_code == 400
    assert r.json()["success"] is False


# -----------------------------
# Farm reports
# -----------------------------

def _report(client, headers, report_type, start="2026-01-01", end="2026-01-31"):
    return client.post(
        "/functions/generate-farm-report",
        headers=headers,
        json={"reportType": report_type, "periodStart": start, "periodEnd": end},
    )


def test_report_requires_auth(client):
    r = _report(client, {}, "monthly")
    assert r.status_code == 401

    r2 = _report(client, {"Authorization": "Bearer nope"}, "monthly")
    assert r2.status_code == 401


def test_unknown_report_type_persists_nothing(client, db, admin_headers):
    r = _report(client, admin_headers, "weekly")
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid report type"
    assert db.query(models.Report).count() == 0


def test_sales_summary_report(client, admin_headers):
    _add_sale(client, 100, "paid", sale_date="2026-01-10")
    _add_sale(client, 300, "pending", sale_date="2026-01-20")
    _add_sale(client, 999, "paid", sale_date="2026-02-20")

    r = _report(client, admin_headers, "sales_summary")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    report = body["report"]
    assert report["title"] == "Sales Summary Report (Thu Jan 01 2026 - Sat Jan 31 2026)"
    assert body["message"] == f"{report['title']} generated successfully"
    assert report["created_by"] == "admin-user"

    content = report["content"]
    assert content["summary"]["totalSales"] == 2
    assert content["summary"]["totalRevenue"] == 400
    assert content["summary"]["averageSaleValue"] == 200
    assert content["salesByProduct"]["Milk"]["sales"] == 2
    assert len(content["recentSales"]) == 2


def test_inventory_summary_report(client, db, admin_headers):
    _add_item(db, "Layers mash", 2, min_threshold=10, unit_cost=100)
    _add_item(db, "DAP", 25, min_threshold=8, unit_cost=10)
    _add_purchase(client, 40, "paid", purchase_date="2026-01-12")

    r = _report(client, admin_headers, "inventory_summary")
    assert r.status_code == 200, r.text
    content = r.json()["report"]["content"]
    assert content["summary"] == {"totalItems": 2, "lowStockItems": 1, "totalInventoryValue": 450}
    assert [i["item_name"] for i in content["lowStockAlert"]] == ["Layers mash"]
    assert len(content["recentPurchases"]) == 1
    assert list(content["inventoryByCategory"]) == ["feed"]


def test_livestock_status_report(client, admin_headers):
    client.post("/livestock/", json={"type": "goat", "health_status": "sick", "date_of_birth_on_farm": "2025-01-01"})
    client.post("/livestock/", json={"type": "goat", "date_of_arrival_at_farm": "2025-06-01"})

    r = _report(client, admin_headers, "livestock_status", start="2000-01-01", end="2099-12-31")
    assert r.status_code == 200, r.text
    content = r.json()["report"]["content"]
    assert content["summary"]["totalLivestock"] == 2
    assert content["summary"]["sickCount"] == 1
    assert content["summary"]["newLivestockInPeriod"] == 2
    assert content["healthStatus"] == {"sick": 1, "healthy": 1}
    assert len(content["livestockByType"]["goat"]) == 2


def test_composite_report_is_listed_afterwards(client, admin_headers):
    _add_sale(client, 100, "paid", sale_date="2026-01-10")
    _add_purchase(client, 40, "paid", purchase_date="2026-01-12", category="feed")
    client.post("/crops/", json={"name": "Kale", "type": "vegetable", "farm_location": "Greenhouse"})

    r = _report(client, admin_headers, "quarterly")
    assert r.status_code == 200, r.text
    report = r.json()["report"]
    assert report["title"].startswith("Quarterly Farm Report (")
    summary = report["content"]["summary"]
    assert summary["revenue"] == 100
    assert summary["expenses"] == 40
    assert summary["profit"] == 60
    assert summary["totalCrops"] == 1
    assert report["content"]["purchases"]["byCategory"] == {"feed": {"count": 1, "cost": 40}}
    assert report["content"]["crops"]["byStatus"] == {"planted": 1}

    listed = client.get("/reports/").json()
    assert [x["id"] for x in listed] == [report["id"]]
    assert client.get(f"/reports/{report['id']}").json()["report_type"] == "quarterly"


# -----------------------------
# CORS
# -----------------------------

def test_cors_preflight_allows_any_origin(client):
    r = client.options(
        "/functions/inventory-alerts",
        headers={
            "Origin": "https://farm.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
