"""
Lifecycle policies (composable validation rules).

Each policy validates one rule and raises a domain error before any write.
"""

from custody.buisness.lifecycle.policies.item_availability import ItemAvailabilityPolicy
from custody.buisness.lifecycle.policies.indent_consumption import IndentConsumptionPolicy, IndentEditPolicy
from custody.buisness.lifecycle.policies.order_eligibility import OrderEligibilityPolicy, OrderInwardProgress
from custody.buisness.lifecycle.policies.inward_eligibility import InwardSourceEligibility
from custody.buisness.lifecycle.policies.qc_claim import QCClaimPolicy, QCResolutionPolicy
from custody.buisness.lifecycle.policies.movement_rules import MovementRulesPolicy

__all__ = [
    'ItemAvailabilityPolicy',
    'IndentConsumptionPolicy',
    'IndentEditPolicy',
    'OrderEligibilityPolicy',
    'OrderInwardProgress',
    'InwardSourceEligibility',
    'QCClaimPolicy',
    'QCResolutionPolicy',
    'MovementRulesPolicy',
]
