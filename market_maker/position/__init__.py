"""
Position Module
==============

Inventory and PnL bookkeeping fed by fills.
"""

from .inventory import InventoryPosition, PnL, FillResult
from .tracker import PositionTracker

__all__ = ['InventoryPosition', 'PnL', 'FillResult', 'PositionTracker']
