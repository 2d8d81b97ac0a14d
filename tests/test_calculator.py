"""Tests for the cart totals calculator."""

import pytest
from factories import make_item, make_rule
from pricing.calculator import (
    STANDARD_SHIPPING_COST,
    compute_totals,
    free_shipping_threshold,
    round2,
    sort_rules,
)
from pricing.exceptions import MalformedRuleError
from pricing.models import CartRuleStatus, CartRuleType

pytestmark = pytest.mark.unit

SHIPPING = CartRuleType.SHIPPING
DISCOUNT = CartRuleType.DISCOUNT
RESTRICTION = CartRuleType.RESTRICTION
BENEFIT = CartRuleType.BENEFIT


class TestRound2:
    def test_rounds_half_up(self):
        assert round2(2.675) == 2.68
        assert round2(1.005) == 1.01

    def test_keeps_whole_cents(self):
        assert round2(29.9) == 29.9
        assert round2(0.0) == 0.0


class TestSubtotal:
    def test_empty_cart_with_no_rules(self):
        totals = compute_totals([])
        assert totals.subtotal == 0.0
        assert totals.shipping_cost == STANDARD_SHIPPING_COST
        assert totals.discount == 0.0
        assert totals.total == 29.9
        assert totals.validation_errors == []
        assert totals.applied_benefits == []

    def test_sale_price_overrides_unit_price(self):
        totals = compute_totals([make_item(price=100.0, sale_price=80.0, quantity=2)])
        assert totals.subtotal == 160.0

    def test_sums_every_line(self):
        items = [make_item("a", price=12.5, quantity=2), make_item("b", price=5.0, quantity=3)]
        assert compute_totals(items).subtotal == 40.0

    def test_total_is_rounded_to_cents(self):
        totals = compute_totals([make_item(price=33.333, quantity=3)])
        assert totals.subtotal == pytest.approx(99.999)
        assert totals.total == 129.9

    def test_same_inputs_give_same_totals(self):
        items = [make_item("a", price=19.99, quantity=3), make_item("b", price=7.25)]
        rules = [make_rule("ship", SHIPPING, 50), make_rule("disc", DISCOUNT, 15)]
        first = compute_totals(items, rules)
        second = compute_totals(items, rules)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_rule_order_in_input_does_not_matter(self):
        items = [make_item(price=120.0)]
        rules = [
            make_rule("d1", DISCOUNT, 10, priority=1),
            make_rule("d2", DISCOUNT, 30, priority=2),
            make_rule("b1", BENEFIT, 100, priority=3),
            make_rule("b2", BENEFIT, 50, priority=4),
        ]
        assert compute_totals(items, rules) == compute_totals(items, list(reversed(rules)))


class TestShippingRules:
    def test_standard_rate_when_no_rule_matches(self):
        totals = compute_totals([make_item(price=50.0)], [make_rule("ship", SHIPPING, 300)])
        assert totals.shipping_cost == STANDARD_SHIPPING_COST

    def test_free_shipping_at_threshold(self):
        totals = compute_totals([make_item(price=300.0)], [make_rule("ship", SHIPPING, 300)])
        assert totals.shipping_cost == 0.0

    def test_first_matching_rule_wins(self):
        rules = [
            make_rule("high", SHIPPING, 500, priority=1),
            make_rule("low", SHIPPING, 100, priority=2),
        ]
        totals = compute_totals([make_item(price=150.0)], rules)
        assert totals.shipping_cost == 0.0

    def test_custom_standard_rate(self):
        totals = compute_totals([make_item()], standard_shipping=15.0)
        assert totals.shipping_cost == 15.0
        assert totals.total == 25.0

    def test_zero_threshold_frees_shipping_on_empty_cart(self):
        totals = compute_totals([], [make_rule("ship", SHIPPING, 0)])
        assert totals.shipping_cost == 0.0
        assert totals.total == 0.0


class TestDiscountRules:
    def test_percentage_of_subtotal(self):
        totals = compute_totals([make_item(price=200.0)], [make_rule("disc", DISCOUNT, 10)])
        assert totals.discount == 20.0
        assert totals.total == 209.9

    def test_discounts_do_not_stack(self):
        rules = [
            make_rule("ten", DISCOUNT, 10, priority=1),
            make_rule("twenty", DISCOUNT, 20, priority=2),
        ]
        totals = compute_totals([make_item(price=200.0)], rules)
        assert totals.discount == 20.0

    def test_priority_ties_break_on_id(self):
        rules = [
            make_rule("b-rule", DISCOUNT, 50, priority=1),
            make_rule("a-rule", DISCOUNT, 10, priority=1),
        ]
        totals = compute_totals([make_item(price=100.0)], rules)
        assert totals.discount == 10.0

    def test_full_discount_never_goes_negative(self):
        totals = compute_totals([make_item(price=80.0)], [make_rule("all", DISCOUNT, 100)])
        assert totals.discount == 80.0
        assert totals.total == STANDARD_SHIPPING_COST


class TestRestrictionRules:
    def test_unmet_minimum_adds_error(self):
        rule = make_rule("min", RESTRICTION, 100, name="Minimum order")
        totals = compute_totals([make_item(price=50.0)], [rule])
        assert totals.validation_errors == [
            "Minimum order: minimum order of 100.00 not met (short by 50.00)"
        ]
        assert not totals.checkout_allowed

    def test_restriction_does_not_change_prices(self):
        items = [make_item(price=50.0)]
        rules = [make_rule("disc", DISCOUNT, 10)]
        restricted = compute_totals(items, [*rules, make_rule("min", RESTRICTION, 100)])
        unrestricted = compute_totals(items, rules)
        assert restricted.shipping_cost == unrestricted.shipping_cost == STANDARD_SHIPPING_COST
        assert restricted.discount == unrestricted.discount == 5.0
        assert restricted.total == unrestricted.total

    def test_met_minimum_has_no_error(self):
        totals = compute_totals([make_item(price=100.0)], [make_rule("min", RESTRICTION, 100)])
        assert totals.validation_errors == []
        assert totals.checkout_allowed


class TestBenefitRules:
    def test_every_met_benefit_is_listed_in_priority_order(self):
        rules = [
            make_rule("wrap", BENEFIT, 150, priority=2, name="Gift wrap"),
            make_rule("sample", BENEFIT, 100, priority=1, name="Free sample"),
            make_rule("invite", BENEFIT, 300, priority=3, name="Tasting invite"),
        ]
        totals = compute_totals([make_item(price=200.0)], rules)
        assert totals.applied_benefits == ["Free sample", "Gift wrap"]

    def test_benefits_do_not_change_prices(self):
        items = [make_item(price=200.0)]
        with_benefit = compute_totals(items, [make_rule("b", BENEFIT, 100)])
        assert with_benefit.total == compute_totals(items).total


class TestInactiveAndMalformedRules:
    def test_paused_rules_are_ignored(self):
        rules = [
            make_rule("ship", SHIPPING, 0, status=CartRuleStatus.PAUSED),
            make_rule("disc", DISCOUNT, 50, status=CartRuleStatus.PAUSED),
            make_rule("min", RESTRICTION, 1000, status=CartRuleStatus.PAUSED),
        ]
        items = [make_item(price=100.0)]
        assert compute_totals(items, rules) == compute_totals(items)

    def test_missing_value_is_a_no_op(self):
        totals = compute_totals([make_item(price=100.0)], [make_rule("ship", SHIPPING, None)])
        assert totals.shipping_cost == STANDARD_SHIPPING_COST

    def test_out_of_range_percentage_falls_through_to_next_discount(self):
        rules = [
            make_rule("bad", DISCOUNT, 150, priority=1),
            make_rule("good", DISCOUNT, 10, priority=2),
        ]
        totals = compute_totals([make_item(price=100.0)], rules)
        assert totals.discount == 10.0

    def test_negative_threshold_is_ignored(self):
        totals = compute_totals([], [make_rule("b", BENEFIT, -5)])
        assert totals.applied_benefits == []

    def test_strict_mode_raises(self):
        with pytest.raises(MalformedRuleError) as exc_info:
            compute_totals([make_item()], [make_rule("bad", DISCOUNT, 150)], strict=True)
        assert exc_info.value.rule_id == "bad"

    def test_strict_mode_skips_paused_rules(self):
        rule = make_rule("bad", DISCOUNT, 150, status=CartRuleStatus.PAUSED)
        totals = compute_totals([make_item()], [rule], strict=True)
        assert totals.discount == 0.0


class TestTotalIsNeverNegative:
    @pytest.mark.parametrize("price", [0.0, 0.01, 9.99, 250.0])
    @pytest.mark.parametrize("percentage", [0, 50, 100])
    def test_total_non_negative(self, price, percentage):
        rules = [make_rule("disc", DISCOUNT, percentage), make_rule("ship", SHIPPING, 100)]
        totals = compute_totals([make_item(price=price)], rules)
        assert totals.total >= 0.0
        assert totals.discount <= totals.subtotal


class TestRuleHelpers:
    def test_sort_rules_drops_paused_and_orders_by_priority(self):
        rules = [
            make_rule("c", BENEFIT, 1, priority=3),
            make_rule("a", BENEFIT, 1, priority=1, status=CartRuleStatus.PAUSED),
            make_rule("b", BENEFIT, 1, priority=2),
        ]
        assert [r.id for r in sort_rules(rules)] == ["b", "c"]

    def test_free_shipping_threshold_is_lowest_active_value(self):
        rules = [
            make_rule("s1", SHIPPING, 500),
            make_rule("s2", SHIPPING, 300),
            make_rule("s3", SHIPPING, 100, status=CartRuleStatus.PAUSED),
            make_rule("d", DISCOUNT, 5),
        ]
        assert free_shipping_threshold(rules) == 300

    def test_free_shipping_threshold_without_shipping_rules(self):
        assert free_shipping_threshold([make_rule("d", DISCOUNT, 5)]) is None
