"""
projops_config -- single public entrypoint for operational configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned ``OpsConfig``
    by injection and never read files or environment variables directly.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``projops_kernel``
    and ``projops_engines`` and below ``projops_modules``.  The kernel MUST
    NEVER import from ``projops_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- validation failed; every problem is listed.

Audit relevance:
    Every successful ``get_active_config()`` call emits a ``CONFIG_TRACE``
    log entry with the config id, version and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from projops_config.loader import load_config
from projops_config.schema import CompanySettings, OpsConfig, POSettings, ScheduleSettings
from projops_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"
CONFIG_ENV_VAR = "PROJOPS_CONFIG"


def get_active_config(path: Path | str | None = None) -> OpsConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``path`` argument, then the
    ``PROJOPS_CONFIG`` environment variable, then the bundled
    ``sets/default.yaml``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If configuration validation fails.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG_PATH
    config = load_config(Path(path))

    _logger.info(
        "CONFIG_TRACE",
        extra={
            "trace_type": "CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "po_prefix": config.purchase_orders.prefix,
            "po_number_format": config.purchase_orders.number_format,
        },
    )
    return config


__all__ = [
    "CompanySettings",
    "OpsConfig",
    "POSettings",
    "ScheduleSettings",
    "get_active_config",
]
