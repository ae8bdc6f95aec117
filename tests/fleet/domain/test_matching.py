"""Tests for stock-to-order matching."""

import copy

from builders import make_order_record, make_stock_record

from fleet.order.order import Order
from fleet.stock.matching import find_candidates, match_opportunities, summarize_stock
from fleet.stock.vehicle import StockVehicle


def _order(order_id, **overrides):
    return Order.from_record({"id": order_id, **make_order_record(**overrides)})


def _vehicle(stock_id, **overrides):
    return StockVehicle.from_record({"id": stock_id, **make_stock_record(**overrides)})


class TestFindCandidates:
    def test_exact_match(self):
        candidates = find_candidates([_vehicle("stk-1")], [_order("ord-1")])
        assert [str(o.id) for o in candidates["stk-1"]] == ["ord-1"]

    def test_match_ignores_case(self):
        vehicle = _vehicle("stk-1", model="x5", trim="m sport", color="BLACK")
        candidates = find_candidates([vehicle], [_order("ord-1")])
        assert "stk-1" in candidates

    def test_longer_trim_is_not_a_match(self):
        vehicle = _vehicle("stk-1", trim="M Sport Pro")
        assert find_candidates([vehicle], [_order("ord-1")]) == {}

    def test_surrounding_whitespace_is_not_trimmed(self):
        vehicle = _vehicle("stk-1", color="Black ")
        assert find_candidates([vehicle], [_order("ord-1")]) == {}

    def test_only_pending_orders_are_candidates(self):
        orders = [
            _order("ord-1", status="confirmed", vin="WBA00000000000001"),
            _order("ord-2", status="cancelled"),
            _order("ord-3"),
        ]
        candidates = find_candidates([_vehicle("stk-1")], orders)
        assert [str(o.id) for o in candidates["stk-1"]] == ["ord-3"]

    def test_only_available_vehicles_are_listed(self):
        stock = [
            _vehicle("stk-1", status="reserved"),
            _vehicle("stk-2", status="sold"),
            _vehicle("stk-3", status="damaged"),
            _vehicle("stk-4"),
        ]
        assert list(find_candidates(stock, [_order("ord-1")])) == ["stk-4"]

    def test_vehicles_without_candidates_are_omitted(self):
        stock = [_vehicle("stk-1"), _vehicle("stk-2", model="iX")]
        assert list(find_candidates(stock, [_order("ord-1")])) == ["stk-1"]

    def test_several_orders_keep_input_order(self):
        orders = [_order("ord-b"), _order("ord-a"), _order("ord-c", vehicle_color="White")]
        candidates = find_candidates([_vehicle("stk-1")], orders)
        assert [str(o.id) for o in candidates["stk-1"]] == ["ord-b", "ord-a"]

    def test_one_order_can_appear_under_several_vehicles(self):
        stock = [_vehicle("stk-1"), _vehicle("stk-2", vin="WBA22222222222222")]
        candidates = find_candidates(stock, [_order("ord-1")])
        assert set(candidates) == {"stk-1", "stk-2"}

    def test_inputs_are_left_untouched(self):
        stock = [_vehicle("stk-1")]
        orders = [_order("ord-1")]
        before = (copy.deepcopy([v.to_record() for v in stock]), copy.deepcopy([o.to_record() for o in orders]))

        find_candidates(stock, orders)
        find_candidates(stock, orders)

        assert ([v.to_record() for v in stock], [o.to_record() for o in orders]) == before

    def test_empty_inputs(self):
        assert find_candidates([], []) == {}


class TestMatchOpportunities:
    def test_counts_vehicles_with_candidates(self):
        stock = [_vehicle("stk-1"), _vehicle("stk-2", color="White"), _vehicle("stk-3")]
        orders = [_order("ord-1"), _order("ord-2")]
        assert match_opportunities(stock, orders) == 2


class TestSummarizeStock:
    def test_every_status_is_present(self):
        stock = [_vehicle("stk-1"), _vehicle("stk-2"), _vehicle("stk-3", status="sold")]
        assert summarize_stock(stock) == {"available": 2, "reserved": 0, "sold": 1, "damaged": 0}
