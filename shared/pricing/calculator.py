"""
Cart Totals Calculator

Turns line items and a snapshot of merchant cart rules into a totals
breakdown. The calculator is pure: it never fetches rules, reads the
clock or keeps state, so identical inputs always give identical output.
"""

import math
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .exceptions import MalformedRuleError
from .models import CartRule, CartRuleType, CartTotals, LineItem

logger = logging.getLogger(__name__)

STANDARD_SHIPPING_COST = 29.90

_CENT = Decimal("0.01")


def round2(amount: float) -> float:
    """Round half-up to whole cents"""
    return float(Decimal(repr(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def compute_subtotal(items: Iterable[LineItem]) -> float:
    """Sum of line totals at full precision (no intermediate rounding)"""
    return float(math.fsum(item.line_total for item in items))


def sort_rules(rules: Iterable[CartRule]) -> list[CartRule]:
    """Active rules in evaluation order: priority ascending, then id"""
    return sorted(
        (rule for rule in rules if rule.is_active),
        key=lambda rule: (rule.priority, rule.id),
    )


def _ignore(rule: CartRule, reason: str, strict: bool) -> None:
    if strict:
        raise MalformedRuleError(rule.id, reason)
    logger.debug(f"Ignoring cart rule {rule.name!r} ({rule.id}): {reason}")
    return None


def _threshold(rule: CartRule, strict: bool) -> Optional[float]:
    value = rule.value
    if value is None or not math.isfinite(value) or value < 0:
        return _ignore(rule, f"threshold must be a non-negative number, got {value!r}", strict)
    return value


def _percentage(rule: CartRule, strict: bool) -> Optional[float]:
    value = rule.value
    if value is None or not math.isfinite(value) or not 0 <= value <= 100:
        return _ignore(rule, f"percentage must be between 0 and 100, got {value!r}", strict)
    return value


def _evaluate_restrictions(rules: list[CartRule], subtotal: float, strict: bool) -> list[str]:
    errors = []
    for rule in rules:
        minimum = _threshold(rule, strict)
        if minimum is not None and subtotal < minimum:
            errors.append(
                f"{rule.name}: minimum order of {minimum:.2f} not met "
                f"(short by {minimum - subtotal:.2f})"
            )
    return errors


def _evaluate_shipping(
    rules: list[CartRule],
    subtotal: float,
    standard_shipping: float,
    strict: bool,
) -> float:
    for rule in rules:
        threshold = _threshold(rule, strict)
        if threshold is not None and subtotal >= threshold:
            logger.debug(f"Free shipping from rule {rule.name!r}")
            return 0.0
    return standard_shipping


def _evaluate_discount(rules: list[CartRule], subtotal: float, strict: bool) -> float:
    # Discount rules never stack: the first usable one wins.
    for rule in rules:
        percentage = _percentage(rule, strict)
        if percentage is not None:
            logger.debug(f"Applying {percentage}% discount from rule {rule.name!r}")
            return min(subtotal, subtotal * percentage / 100)
    return 0.0


def _evaluate_benefits(rules: list[CartRule], subtotal: float, strict: bool) -> list[str]:
    benefits = []
    for rule in rules:
        threshold = _threshold(rule, strict)
        if threshold is not None and subtotal >= threshold:
            benefits.append(rule.name)
    return benefits


def compute_totals(
    items: Iterable[LineItem],
    rules: Iterable[CartRule] = (),
    *,
    standard_shipping: float = STANDARD_SHIPPING_COST,
    strict: bool = False,
) -> CartTotals:
    """
    Compute the cart totals for a set of items under a rule snapshot.

    Restriction rules only produce validation errors, shipping rules are
    first-match-wins, a single discount rule applies and benefit rules
    stack. Paused rules are skipped.

    Args:
        items: Cart line items
        rules: Cart rule snapshot, in any order. Defaults to no rules.
        standard_shipping: Shipping cost when no shipping rule matches
        strict: Raise MalformedRuleError on unusable rule values instead
            of treating those rules as no-ops

    Returns:
        CartTotals with ``total = max(0, round2(subtotal + shipping - discount))``
    """
    items = list(items)
    subtotal = compute_subtotal(items)
    ordered = sort_rules(rules)
    by_type = {rule_type: [r for r in ordered if r.type == rule_type] for rule_type in CartRuleType}

    logger.debug(
        f"Computing totals for {len(items)} items, subtotal={subtotal}, "
        f"rules={[(r.name, r.type.value, r.priority) for r in ordered]}"
    )

    validation_errors = _evaluate_restrictions(by_type[CartRuleType.RESTRICTION], subtotal, strict)
    shipping_cost = _evaluate_shipping(
        by_type[CartRuleType.SHIPPING], subtotal, standard_shipping, strict
    )
    discount = _evaluate_discount(by_type[CartRuleType.DISCOUNT], subtotal, strict)
    applied_benefits = _evaluate_benefits(by_type[CartRuleType.BENEFIT], subtotal, strict)

    return CartTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        discount=discount,
        total=max(0.0, round2(subtotal + shipping_cost - discount)),
        validation_errors=validation_errors,
        applied_benefits=applied_benefits,
    )


def free_shipping_threshold(rules: Iterable[CartRule]) -> Optional[float]:
    """Lowest subtotal that unlocks free shipping under the active rules, if any"""
    thresholds = [
        rule.value
        for rule in sort_rules(rules)
        if rule.type == CartRuleType.SHIPPING
        and rule.value is not None
        and math.isfinite(rule.value)
        and rule.value >= 0
    ]
    return min(thresholds) if thresholds else None
