"""
Unit tests for the pure domain helpers: money math, order status rules and
order number format.
"""

import random
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.domain.order_number import generate_order_number
from storefront.domain.order_status import OrderStatus, can_transition
from storefront.domain.pricing import cart_totals, line_total
from storefront.exceptions import InvalidStatusError


def _line(price, discount, quantity):
    return SimpleNamespace(price=Decimal(price), discount=Decimal(discount), quantity=quantity)


class TestPricing:
    def test_line_total_without_discount(self):
        assert line_total(Decimal("10.00"), Decimal("0"), 2) == Decimal("20.00")

    def test_line_total_with_discount(self):
        assert line_total(Decimal("5.00"), Decimal("10"), 1) == Decimal("4.50")

    def test_line_total_rounds_half_up_to_cents(self):
        # 0.99 * 0.85 = 0.8415
        assert line_total(Decimal("0.99"), Decimal("15"), 1) == Decimal("0.84")
        # 0.05 * 0.5 = 0.025
        assert line_total(Decimal("0.05"), Decimal("50"), 1) == Decimal("0.03")

    def test_cart_totals_sum_lines_and_add_shipping(self):
        lines = [_line("10.00", "0", 2), _line("5.00", "10", 1)]
        subtotal, total = cart_totals(lines, Decimal("3.99"))
        assert subtotal == Decimal("24.50")
        assert total == Decimal("28.49")

    def test_cart_totals_round_the_exact_sum(self):
        # three lines of 0.045: rounded lines would give 0.15
        lines = [_line("0.05", "10", 1) for _ in range(3)]
        subtotal, total = cart_totals(lines, Decimal("1.00"))
        assert subtotal == Decimal("0.14")
        assert total == Decimal("1.14")

    def test_cart_totals_empty(self):
        assert cart_totals([], Decimal("7.00")) == (Decimal("0.00"), Decimal("7.00"))


class TestOrderStatus:
    def test_parse_known_value(self):
        assert OrderStatus.parse("delivered") is OrderStatus.DELIVERED

    @pytest.mark.parametrize("value", ["bogus", "", "DELIVERED", None])
    def test_parse_unknown_value(self, value):
        with pytest.raises(InvalidStatusError) as exc:
            OrderStatus.parse(value)
        assert "pending" in exc.value.allowed

    def test_forward_moves_allowed(self):
        assert can_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED)
        assert can_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)
        assert can_transition(OrderStatus.PREPARING, OrderStatus.ON_THE_WAY)

    def test_backward_move_rejected(self):
        assert not can_transition(OrderStatus.PREPARING, OrderStatus.PENDING)

    def test_cancel_from_any_open_state(self):
        for status in (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.ON_THE_WAY):
            assert can_transition(status, OrderStatus.CANCELLED)

    def test_terminal_states_are_frozen(self):
        assert not can_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)
        assert not can_transition(OrderStatus.CANCELLED, OrderStatus.PENDING)

    def test_lenient_mode_accepts_anything(self):
        assert can_transition(OrderStatus.DELIVERED, OrderStatus.PENDING, forward_only=False)


class TestOrderNumber:
    def test_format(self):
        now = datetime(2026, 3, 7, 12, 0, tzinfo=timezone.utc)
        number = generate_order_number(prefix="ORD", now=now, rng=random.Random(1))
        assert number.startswith("ORD260307")
        assert len(number) == len("ORD") + 6 + 4
        assert number[-4:].isdigit()

    def test_suffix_is_zero_padded(self):
        rng = SimpleNamespace(randint=lambda a, b: 7)
        now = datetime(2026, 12, 31, tzinfo=timezone.utc)
        assert generate_order_number(prefix="X", now=now, rng=rng) == "X2612310007"
