"""
Configuration Loader (``projops_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``projops_config.schema`` dataclasses.  Services never call this directly;
the single runtime entry point is ``projops_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` listing every problem found.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from projops_config.schema import CompanySettings, OpsConfig, POSettings, ScheduleSettings
from projops_engines.gst import INDIAN_STATE_CODES, extract_jurisdiction_code
from projops_engines.po_numbering import PONumberFormat


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a Decimal from a YAML scalar, going through str() for floats."""
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def _str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_company(data: dict[str, Any]) -> CompanySettings:
    """Parse CompanySettings; the state code falls back to the GSTIN prefix."""
    gstin = _str(data.get("gstin")).upper()
    state_code = _str(data.get("state_code"))
    if not state_code:
        state_code = extract_jurisdiction_code(gstin) or ""
    return CompanySettings(
        name=data["name"],
        gstin=gstin,
        state_code=state_code,
        address=_str(data.get("address")),
        pan=_str(data.get("pan")).upper(),
        phone=data.get("phone"),
        email=data.get("email"),
        website=data.get("website"),
    )


def parse_po_settings(data: dict[str, Any]) -> POSettings:
    return POSettings(
        prefix=_str(data.get("prefix", "PO")),
        number_format=_str(data.get("number_format", "simple")),
        starting_number=int(data.get("starting_number", 1)),
        default_tax_percent=parse_decimal(data.get("default_tax_percent", "18")),
        currency=_str(data.get("currency", "INR")),
        default_payment_terms=data.get("default_payment_terms"),
        default_delivery_terms=data.get("default_delivery_terms"),
    )


def parse_schedule_settings(data: dict[str, Any]) -> ScheduleSettings:
    return ScheduleSettings(
        min_reason_length=int(data.get("min_reason_length", 20)),
        min_name_length=int(data.get("min_name_length", 3)),
        max_name_length=int(data.get("max_name_length", 100)),
        delayed_threshold_days=int(data.get("delayed_threshold_days", 7)),
    )


def validate_config(config: OpsConfig) -> list[str]:
    """Return every structural problem in a parsed configuration."""
    errors: list[str] = []

    company = config.company
    if not company.name:
        errors.append("company.name is required")
    if company.gstin and len(company.gstin) != 15:
        errors.append(f"company.gstin must be 15 characters, got {len(company.gstin)}")
    if company.state_code and company.state_code not in INDIAN_STATE_CODES:
        errors.append(f"company.state_code {company.state_code!r} is not a GST state code")
    if (
        company.gstin
        and company.state_code
        and company.gstin[:2] != company.state_code
    ):
        errors.append("company.state_code does not match the GSTIN prefix")

    po = config.purchase_orders
    if not po.prefix:
        errors.append("purchase_orders.prefix is required")
    if po.number_format not in {f.value for f in PONumberFormat}:
        errors.append(f"purchase_orders.number_format {po.number_format!r} is not supported")
    if po.starting_number < 1:
        errors.append("purchase_orders.starting_number must be at least 1")
    if po.default_tax_percent < 0:
        errors.append("purchase_orders.default_tax_percent cannot be negative")

    schedule = config.schedule
    if schedule.min_reason_length < 1:
        errors.append("schedule.min_reason_length must be at least 1")
    if schedule.min_name_length < 1:
        errors.append("schedule.min_name_length must be at least 1")
    if schedule.max_name_length < schedule.min_name_length:
        errors.append("schedule.max_name_length must not be below min_name_length")
    if schedule.delayed_threshold_days < 0:
        errors.append("schedule.delayed_threshold_days cannot be negative")

    return errors


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw YAML mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_config(data: dict[str, Any]) -> OpsConfig:
    """
    Parse and validate a raw configuration mapping.

    Raises:
        KeyError: if ``config_id`` or ``company`` is missing.
        ValueError: listing every validation problem.
    """
    config = OpsConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        company=parse_company(data["company"]),
        purchase_orders=parse_po_settings(data.get("purchase_orders") or {}),
        schedule=parse_schedule_settings(data.get("schedule") or {}),
        checksum=compute_checksum(data),
    )

    errors = validate_config(config)
    if errors:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
    return config


def load_config(path: Path) -> OpsConfig:
    """Load, parse and validate one YAML configuration file."""
    return parse_config(load_yaml_file(path))
