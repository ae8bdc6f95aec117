"""Integration tests for stock and matching endpoints via TestClient."""

from builders import BROKER, seed_order, seed_stock

from fleet.store import Collection


def _add_vehicle(client, **overrides):
    defaults = {
        "vin": "WBA11111111111111",
        "model": "X5",
        "trim": "M Sport",
        "color": "Black",
        "year": 2024,
        "price": 62000,
        "location": "Munich yard",
    }
    defaults.update(overrides)
    return client.post("/stock", json=defaults)


class TestAddStockEndpoint:
    def test_add_vehicle(self, client, sales_user):
        response = _add_vehicle(client)

        assert response.status_code == 201
        assert response.json()["status"] == "available"

    def test_duplicate_vin(self, client, sales_user):
        _add_vehicle(client)
        response = _add_vehicle(client)

        assert response.status_code == 400
        assert "vin" in response.json()["error"]

    def test_brokers_cannot_add_stock(self, client, identity):
        identity.login(BROKER)
        assert _add_vehicle(client).status_code == 403


class TestStockQueries:
    def test_list_and_filter(self, client, sales_user):
        seed_stock()
        seed_stock(vin="WBA22222222222222", status="sold")

        assert len(client.get("/stock").json()) == 2
        assert [v["vin"] for v in client.get("/stock", params={"status": "sold"}).json()] == ["WBA22222222222222"]

    def test_search_matches_model_vin_trim_or_color(self, client, sales_user):
        seed_stock()
        seed_stock(vin="WBA22222222222222", model="i4", trim="eDrive40", color="Portimao Blue")

        def vins(term):
            return [v["vin"] for v in client.get("/stock", params={"search": term}).json()]

        assert vins("i4") == ["WBA22222222222222"]
        assert vins("edrive") == ["WBA22222222222222"]
        assert vins("blue") == ["WBA22222222222222"]
        assert vins("WBA1111") == ["WBA11111111111111"]
        assert len(vins("wba")) == 2

    def test_summary(self, client, sales_user):
        seed_stock()
        seed_stock(vin="WBA22222222222222", status="damaged")

        assert client.get("/stock/summary").json() == {"available": 1, "reserved": 0, "sold": 0, "damaged": 1}

    def test_change_status(self, client, sales_user):
        vehicle = seed_stock()

        response = client.put(f"/stock/{vehicle['id']}/status", json={"status": "damaged"})

        assert response.status_code == 200
        assert response.json()["status"] == "damaged"

    def test_change_to_reserved_is_refused(self, client, sales_user):
        vehicle = seed_stock()
        response = client.put(f"/stock/{vehicle['id']}/status", json={"status": "reserved"})
        assert response.status_code == 400


class TestMatchEndpoints:
    def test_list_candidates(self, client, sales_user):
        vehicle = seed_stock()
        seed_stock(vin="WBA22222222222222", color="White")
        order = seed_order()
        seed_order(vehicle_trim="M Sport Pro")

        body = client.get("/stock/matches").json()

        assert len(body) == 1
        assert body[0]["stock_id"] == vehicle["id"]
        assert body[0]["vin"] == vehicle["vin"]
        assert [o["id"] for o in body[0]["orders"]] == [order["id"]]

    def test_reserve(self, client, sales_user, store):
        vehicle = seed_stock()
        order = seed_order()

        response = client.post("/stock/matches", json={"order_id": order["id"], "stock_id": vehicle["id"]})

        assert response.status_code == 201
        body = response.json()
        assert body["order"]["status"] == "confirmed"
        assert body["order"]["vin"] == vehicle["vin"]
        assert body["vehicle"]["status"] == "reserved"
        assert client.get("/stock/matches").json() == []

    def test_reserving_twice_is_stale(self, client, sales_user):
        vehicle = seed_stock()
        first = seed_order()
        second = seed_order(order_number="ORD-2")
        client.post("/stock/matches", json={"order_id": first["id"], "stock_id": vehicle["id"]})

        response = client.post("/stock/matches", json={"order_id": second["id"], "stock_id": vehicle["id"]})

        assert response.status_code == 400
        assert response.json()["step"] == "precheck"

    def test_order_write_failure_reports_step(self, client, sales_user, store):
        vehicle = seed_stock()
        order = seed_order()
        store.fail_next("update", Collection.ORDERS)

        response = client.post("/stock/matches", json={"order_id": order["id"], "stock_id": vehicle["id"]})

        assert response.status_code == 503
        assert response.json()["step"] == "order"
        assert store.get(Collection.STOCK_VEHICLES, vehicle["id"])["status"] == "available"

    def test_brokers_cannot_reserve(self, client, identity):
        identity.login(BROKER)
        response = client.post("/stock/matches", json={"order_id": "o", "stock_id": "s"})
        assert response.status_code == 403
