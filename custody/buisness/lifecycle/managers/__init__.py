"""
Workflow orchestrators, one per document type.

Each manager is built from a LifecycleContext (actor + company/location)
and every public method is one atomic operation.
"""

from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.managers.indent_manager import IndentManager
from custody.buisness.lifecycle.managers.order_manager import OrderManager
from custody.buisness.lifecycle.managers.inward_manager import InwardManager
from custody.buisness.lifecycle.managers.qc_manager import QCManager
from custody.buisness.lifecycle.managers.job_work_manager import JobWorkManager
from custody.buisness.lifecycle.managers.outward_manager import OutwardManager
from custody.buisness.lifecycle.managers.movement_manager import MovementManager
from custody.buisness.lifecycle.managers.item_manager import ItemManager

__all__ = [
    'LifecycleManager',
    'IndentManager',
    'OrderManager',
    'InwardManager',
    'QCManager',
    'JobWorkManager',
    'OutwardManager',
    'MovementManager',
    'ItemManager',
]
