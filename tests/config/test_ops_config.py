"""
Tests for YAML configuration loading.

Covers:
- The bundled default set
- Resolution order: explicit path, PROJOPS_CONFIG, default
- Company state code derived from the GSTIN
- Validation that lists every problem at once
- CONFIG_TRACE emission
"""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from projops_config import CONFIG_ENV_VAR, get_active_config
from projops_config.loader import compute_checksum, load_config, parse_config


def _write(tmp_path: Path, data: dict, name: str = "ops.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


def _minimal(**overrides) -> dict:
    data = {
        "config_id": "site-b",
        "version": 3,
        "company": {"name": "Site B Engineering", "gstin": "27aaacd1234e1z2"},
        "purchase_orders": {"prefix": "PO/SB", "number_format": "financial-year"},
    }
    data.update(overrides)
    return data


class TestDefaultSet:
    def test_loads(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = get_active_config()

        assert config.config_id == "default"
        assert config.company.state_code == "29"
        assert config.purchase_orders.prefix == "PO-EA"
        assert config.purchase_orders.default_tax_percent == Decimal("18")
        assert config.schedule.min_reason_length == 20
        assert len(config.checksum) == 64


class TestResolution:
    def test_explicit_path(self, tmp_path):
        config = get_active_config(_write(tmp_path, _minimal()))
        assert config.config_id == "site-b"
        assert config.version == 3

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = _write(tmp_path, _minimal(config_id="from-env"))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert get_active_config().config_id == "from-env"

    def test_explicit_path_beats_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(_write(tmp_path, _minimal(config_id="env"), "a.yaml")))
        explicit = _write(tmp_path, _minimal(config_id="explicit"), "b.yaml")

        assert get_active_config(explicit).config_id == "explicit"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_config_trace_logged(self, tmp_path, captured_logs):
        get_active_config(_write(tmp_path, _minimal()))

        traces = [r for r in captured_logs() if r["message"] == "CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == "site-b"
        assert traces[0]["po_number_format"] == "financial-year"


class TestParsing:
    def test_gstin_normalized_and_state_derived(self):
        config = parse_config(_minimal())

        assert config.company.gstin == "27AAACD1234E1Z2"
        assert config.company.state_code == "27"

    def test_po_defaults(self):
        config = parse_config(_minimal(purchase_orders=None))

        assert config.purchase_orders.prefix == "PO"
        assert config.purchase_orders.number_format == "simple"
        assert config.purchase_orders.starting_number == 1
        assert config.purchase_orders.currency == "INR"

    def test_float_tax_percent_parsed_through_str(self):
        data = _minimal(purchase_orders={"prefix": "PO", "default_tax_percent": 12.5})
        assert parse_config(data).purchase_orders.default_tax_percent == Decimal("12.5")

    def test_missing_company_raises_key_error(self):
        data = _minimal()
        del data["company"]
        with pytest.raises(KeyError):
            parse_config(data)

    def test_checksum_ignores_key_order(self):
        a = {"config_id": "x", "company": {"name": "A", "gstin": ""}}
        b = {"company": {"gstin": "", "name": "A"}, "config_id": "x"}
        assert compute_checksum(a) == compute_checksum(b)

    def test_company_without_gstin_is_allowed(self):
        config = parse_config(_minimal(company={"name": "Unregistered Works"}))
        assert config.company.missing_tax_fields == ["gstin", "state_code"]


class TestValidation:
    def test_every_problem_listed(self, tmp_path):
        data = _minimal(
            company={"name": "Bad Co", "gstin": "29ABC", "state_code": "98"},
            purchase_orders={"prefix": "", "number_format": "monthly", "starting_number": 0},
            schedule={"min_name_length": 5, "max_name_length": 4},
        )

        with pytest.raises(ValueError) as exc_info:
            load_config(_write(tmp_path, data))

        message = str(exc_info.value)
        assert "company.gstin must be 15 characters" in message
        assert "'98' is not a GST state code" in message
        assert "does not match the GSTIN prefix" in message
        assert "purchase_orders.prefix is required" in message
        assert "'monthly' is not supported" in message
        assert "starting_number must be at least 1" in message
        assert "max_name_length must not be below min_name_length" in message

    def test_negative_tax_rejected(self):
        data = _minimal(purchase_orders={"prefix": "PO", "default_tax_percent": -5})
        with pytest.raises(ValueError, match="cannot be negative"):
            parse_config(data)
