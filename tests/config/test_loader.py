"""Tests for YAML configuration loading and validation."""

import logging
from decimal import Decimal

import pytest
import yaml

from lob_config import DEFAULT_CONFIG_PATH, get_active_config
from lob_config.loader import compute_checksum, load_yaml_file, parse_config, parse_decimal
from lob_engines.leave_accrual import BalancePolicy, LeaveType
from lob_kernel.exceptions import ConfigurationError


def _write(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestDefaults:
    """The bundled defaults.yaml."""

    def test_defaults_load(self):
        config = get_active_config()
        assert config.currency == "INR"
        assert config.locale == "en-IN"
        assert config.leave.balance_policy is BalancePolicy.WARN
        assert config.tax.tax_percentage == Decimal("18")
        assert config.leave.entitlement(LeaveType.ANNUAL) == Decimal("12")
        assert len(config.checksum) == 64

    def test_default_path_exists(self):
        assert DEFAULT_CONFIG_PATH.is_file()

    def test_config_is_hashable(self):
        config = get_active_config()
        assert hash(config) == hash(get_active_config())
        assert isinstance(config.leave.default_entitlements, tuple)

    def test_config_trace_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="lob_kernel.config"):
            config = get_active_config()
        record = next(r for r in caplog.records if r.getMessage() == "LOB_CONFIG_TRACE")
        assert record.checksum == config.checksum
        assert record.balance_policy == "warn"


class TestParseConfig:
    def test_custom_file(self, tmp_path):
        path = _write(tmp_path, {
            "currency": "usd",
            "locale": "en-US",
            "leave": {"balance_policy": "strict", "default_entitlements": {"Sick Leave": 10}},
            "tax": {"cgst_percentage": 2.5, "sgst_percentage": "2.5"},
        })
        config = get_active_config(path)
        assert config.currency == "USD"
        assert config.leave.balance_policy is BalancePolicy.STRICT
        assert config.leave.entitlement(LeaveType.SICK) == Decimal("10")
        assert config.leave.entitlement(LeaveType.STUDY) == Decimal("0")
        assert config.tax.tax_percentage == Decimal("5.0")

    def test_empty_document_uses_defaults(self):
        config = parse_config({})
        assert config.currency == "INR"
        assert config.leave.balance_policy is BalancePolicy.WARN
        assert config.tax.cgst_percentage == Decimal("9")

    def test_unknown_currency(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"currency": "XYZ"})
        assert exc_info.value.key == "currency"

    def test_unknown_locale(self):
        with pytest.raises(ConfigurationError, match="locale"):
            parse_config({"locale": "fr-FR"})

    def test_unknown_policy(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"leave": {"balance_policy": "lenient"}})
        assert exc_info.value.key == "leave.balance_policy"

    def test_unknown_leave_type(self):
        with pytest.raises(ConfigurationError, match="Unknown leave type"):
            parse_config({"leave": {"default_entitlements": {"Sabbatical": 5}}})

    def test_negative_entitlement(self):
        with pytest.raises(ConfigurationError, match="cannot be negative"):
            parse_config({"leave": {"default_entitlements": {"Annual Leave": -1}}})

    def test_tax_out_of_range(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"tax": {"cgst_percentage": 60, "sgst_percentage": 60}})
        assert exc_info.value.key == "tax"

    def test_version_parsed(self):
        assert parse_config({"version": "3"}).version == 3

    @pytest.mark.parametrize("version", ["two", None, [1]])
    def test_invalid_version(self, version):
        with pytest.raises(ConfigurationError, match="version must be an integer") as exc_info:
            parse_config({"version": version})
        assert exc_info.value.key == "version"

    def test_checksum_changes_with_content(self):
        assert parse_config({"locale": "en-IN"}).checksum != parse_config({"locale": "en-GB"}).checksum


class TestLoaderHelpers:
    def test_parse_decimal_float_keeps_digits(self):
        assert parse_decimal(9.5, "k") == Decimal("9.5")

    def test_parse_decimal_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            parse_decimal("nine", "tax.cgst_percentage")

    def test_parse_decimal_rejects_bool(self):
        with pytest.raises(ConfigurationError):
            parse_decimal(True, "k")

    def test_checksum_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "missing.yaml")

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_file(path) == {}
