"""Integration tests for the dashboard endpoint."""

from builders import BROKER, FINANCE, seed_order


class TestDashboardEndpoint:
    def test_sales_dashboard(self, client, sales_user):
        seed_order(order_value=40000)
        seed_order(order_value=60000, status="in_production", vin="WBA11111111111111")

        body = client.get("/dashboard").json()

        assert body["role"] == "sales"
        assert body["total_orders"] == 2
        assert body["in_production_orders"] == 1
        assert body["average_order_value"] == 50000
        assert len(body["trend"]) == 7
        assert [c["title"] for c in body["cards"]][:2] == ["Total Orders", "Pending Orders"]

    def test_finance_cards(self, client, identity):
        identity.login(FINANCE)
        body = client.get("/dashboard").json()
        assert body["cards"][0]["title"] == "Total Revenue"

    def test_broker_scope(self, client, identity):
        seed_order()
        seed_order(user_id=BROKER.id)
        identity.login(BROKER)

        assert client.get("/dashboard").json()["total_orders"] == 1

    def test_empty_dashboard(self, client, sales_user):
        body = client.get("/dashboard").json()

        assert body["total_orders"] == 0
        assert body["average_order_value"] == 0
        assert all(point["orders"] == 0 for point in body["trend"])

    def test_named_timezone(self, client, sales_user):
        response = client.get("/dashboard", params={"tz": "Asia/Tokyo"})
        assert response.status_code == 200

    def test_unknown_timezone(self, client, sales_user):
        response = client.get("/dashboard", params={"tz": "Mars/Olympus"})
        assert response.status_code == 400
        assert "tz" in response.json()["error"]
