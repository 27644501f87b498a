"""
Typed exception hierarchy for the project-operations kernel.

Validation outcomes (baseline-lock preconditions, a delay reason that is
too short, a vendor without a GSTIN) are NOT exceptions.  They are returned
as structured results so a form can show every problem at once.  The
classes below cover the remaining faults: a record that does not exist, a
transition that is not allowed, a configuration that cannot produce a
purchase order, or an attempt to rewrite an audit record.

Every class carries a ``code`` class attribute (machine-readable, stable)
and keeps its context as attributes instead of folding it into the message.

    ProjOpsError (base)
    |
    +-- LookupFailure
    |   +-- ProjectNotFoundError
    |   +-- MilestoneNotFoundError
    |   +-- VendorNotFoundError
    |   +-- PurchaseOrderNotFoundError
    |
    +-- ConfigurationError
    |   +-- CompanySettingsError
    |
    +-- PurchaseOrderError
    |   +-- InvalidPOTransitionError
    |   +-- DuplicatePONumberError
    |
    +-- ScheduleError
    |   +-- TemplateApplicationError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

Codes
-----

Category        | Code                      | When raised
----------------|---------------------------|------------------------------------
Lookup          | PROJECT_NOT_FOUND         | Project ID does not exist
                | MILESTONE_NOT_FOUND       | Milestone not found in the project
                | VENDOR_NOT_FOUND          | Vendor ID does not exist
                | PURCHASE_ORDER_NOT_FOUND  | PO ID does not exist
Configuration   | COMPANY_SETTINGS_INVALID  | Company GSTIN/state code missing
Purchase order  | INVALID_PO_TRANSITION     | e.g. sending a PO that is not draft
                | DUPLICATE_PO_NUMBER       | Unique constraint on po_number hit
Schedule        | TEMPLATE_NOT_APPLICABLE   | Template on a non-empty project
Immutability    | IMMUTABILITY_VIOLATION    | Delay log edited/deleted, baseline
                |                           | date rewritten
"""


class ProjOpsError(Exception):
    """
    Base exception for all project-operations errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "PROJOPS_ERROR"


# Lookup failures


class LookupFailure(ProjOpsError):
    """Base exception for records that could not be found."""

    code: str = "LOOKUP_FAILURE"


class ProjectNotFoundError(LookupFailure):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = str(project_id)
        super().__init__(f"Project not found: {project_id}")


class MilestoneNotFoundError(LookupFailure):
    """Milestone with given ID was not found in the project."""

    code: str = "MILESTONE_NOT_FOUND"

    def __init__(self, project_id: str, milestone_id: str):
        self.project_id = str(project_id)
        self.milestone_id = str(milestone_id)
        super().__init__(
            f"Milestone {milestone_id} not found in project {project_id}"
        )


class VendorNotFoundError(LookupFailure):
    """Vendor with given ID was not found."""

    code: str = "VENDOR_NOT_FOUND"

    def __init__(self, vendor_id: str):
        self.vendor_id = str(vendor_id)
        super().__init__(f"Vendor not found: {vendor_id}")


class PurchaseOrderNotFoundError(LookupFailure):
    """Purchase order with given ID was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, purchase_order_id: str):
        self.purchase_order_id = str(purchase_order_id)
        super().__init__(f"Purchase order not found: {purchase_order_id}")


# Configuration


class ConfigurationError(ProjOpsError):
    """Base exception for configuration problems detected at use time."""

    code: str = "CONFIGURATION_ERROR"


class CompanySettingsError(ConfigurationError):
    """
    Company settings cannot support PO generation.

    Raised when the buyer GSTIN or state code is missing, since the tax
    regime of every PO is keyed off the company state code.
    """

    code: str = "COMPANY_SETTINGS_INVALID"

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Company settings incomplete, missing: "
            + ", ".join(self.missing_fields)
        )


# Purchase orders


class PurchaseOrderError(ProjOpsError):
    """Base exception for purchase order lifecycle errors."""

    code: str = "PURCHASE_ORDER_ERROR"


class InvalidPOTransitionError(PurchaseOrderError):
    """Requested status change is not allowed from the current status."""

    code: str = "INVALID_PO_TRANSITION"

    def __init__(self, purchase_order_id: str, current_status: str, requested: str):
        self.purchase_order_id = str(purchase_order_id)
        self.current_status = current_status
        self.requested = requested
        super().__init__(
            f"Purchase order {purchase_order_id} cannot go from "
            f"{current_status} to {requested}"
        )


class DuplicatePONumberError(PurchaseOrderError):
    """Insert hit the unique constraint on po_number."""

    code: str = "DUPLICATE_PO_NUMBER"

    def __init__(self, po_number: str):
        self.po_number = po_number
        super().__init__(f"PO number already issued: {po_number}")


# Schedule


class ScheduleError(ProjOpsError):
    """Base exception for milestone schedule errors."""

    code: str = "SCHEDULE_ERROR"


class TemplateApplicationError(ScheduleError):
    """Milestone template cannot be applied to the project."""

    code: str = "TEMPLATE_NOT_APPLICABLE"

    def __init__(self, project_id: str, reason: str):
        self.project_id = str(project_id)
        self.reason = reason
        super().__init__(f"Cannot apply template to {project_id}: {reason}")


# Immutability


class ImmutabilityError(ProjOpsError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Delay log entries are immutable from creation; a baselined milestone's
    original planned end date is immutable once set.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
