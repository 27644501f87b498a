"""
ProjOps Modules.

Thin orchestration layers over the ProjOps Kernel and Engines.
Each module contains:
- Domain models (result objects returned to callers)
- A service facade that owns the transaction boundary

Modules:
- Milestones: Project schedule, baseline lock, delay log, weekly status
- Procurement: Vendors, purchase orders, GST totals and numbering

Actual decision logic lives in the engines.
"""

from projops_modules import milestones, procurement

__all__ = ["milestones", "procurement"]
