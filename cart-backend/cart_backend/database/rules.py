"""Cart rule storage for the cart backend"""

from typing import Optional

from pricing.models import CartRule, CartRuleStatus, CartRuleType

# Seed rule set
RULES: dict[str, CartRule] = {
    "rule-free-shipping": CartRule(
        id="rule-free-shipping",
        name="Free shipping over 300",
        type=CartRuleType.SHIPPING,
        priority=1,
        value=300,
        description="Orders of 300 or more ship free.",
    ),
    "rule-minimum-order": CartRule(
        id="rule-minimum-order",
        name="Minimum order",
        type=CartRuleType.RESTRICTION,
        priority=1,
        value=50,
        description="Checkout requires an order of at least 50.",
    ),
    "rule-gift-wrap": CartRule(
        id="rule-gift-wrap",
        name="Free gift wrapping",
        type=CartRuleType.BENEFIT,
        priority=5,
        value=400,
    ),
    "rule-tasting-invite": CartRule(
        id="rule-tasting-invite",
        name="Tasting evening invitation",
        type=CartRuleType.BENEFIT,
        priority=6,
        value=600,
    ),
    "rule-seasonal-sale": CartRule(
        id="rule-seasonal-sale",
        name="Seasonal sale 5%",
        type=CartRuleType.DISCOUNT,
        priority=10,
        value=5,
        status=CartRuleStatus.PAUSED,
        description="Enable during the seasonal sale.",
    ),
}


class RuleDatabase:
    """In-memory cart rule storage"""

    def __init__(self, rules: Optional[dict[str, CartRule]] = None):
        self.rules: dict[str, CartRule] = dict(RULES if rules is None else rules)

    def list_rules(self, active_only: bool = True) -> list[CartRule]:
        """List rules in storage order"""
        rules = list(self.rules.values())
        if active_only:
            rules = [rule for rule in rules if rule.is_active]
        return rules

    def get_rule(self, rule_id: str) -> Optional[CartRule]:
        return self.rules.get(rule_id)

    def upsert_rule(self, rule: CartRule) -> CartRule:
        self.rules[rule.id] = rule
        return rule


# Singleton instance
rule_db = RuleDatabase()
