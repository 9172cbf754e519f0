"""
Reporting Configuration Schema.

Defines section headings, filtering policy and formatting options for the
hierarchical reports.  Loadable from a dict or a YAML file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

import yaml

from ledger_kernel.domain.chart import AccountType, MainGroupKind
from ledger_kernel.logging_config import get_logger
from ledger_modules.reporting.models import DisplayLevel

logger = get_logger("modules.reporting.config")


def _default_section_labels() -> dict[str, str]:
    return {
        AccountType.ASSET.value: "Assets",
        AccountType.LIABILITY.value: "Liabilities",
        AccountType.EQUITY.value: "Equity",
        AccountType.REVENUE.value: "Revenue",
        AccountType.EXPENSE.value: "Expenses",
    }


def _default_main_group_labels() -> dict[str, str]:
    return {
        MainGroupKind.BALANCE_SHEET.value: "Balance Sheet",
        MainGroupKind.PROFIT_AND_LOSS.value: "Profit and Loss",
    }


def _default_element_group_sections() -> dict[str, str]:
    # Element group name (case-insensitive) -> account type of its section.
    # Only consulted to place declared groups that have no accounts.
    return {
        "assets": AccountType.ASSET.value,
        "liabilities": AccountType.LIABILITY.value,
        "equity": AccountType.EQUITY.value,
        "incomes": AccountType.REVENUE.value,
        "income": AccountType.REVENUE.value,
        "revenue": AccountType.REVENUE.value,
        "expenses": AccountType.EXPENSE.value,
    }


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls section headings, zero/empty filtering and display options.
    """

    # Entity name shown on reports
    entity_name: str = "Company"

    # Default currency for reports
    default_currency: str = "USD"

    # Rounding precision for display (exporters only; totals stay exact)
    display_precision: int = 2

    # Whether accounts with a zero balance become leaf rows
    include_zero_balances: bool = False

    # Whether groups with no contributing accounts are rendered
    include_empty_groups: bool = False

    default_display_level: DisplayLevel = DisplayLevel.ALL

    subtotal_prefix: str = "Total"

    # Account type value -> section heading
    section_labels: dict[str, str] = field(default_factory=_default_section_labels)

    # Main group name -> human heading
    main_group_labels: dict[str, str] = field(
        default_factory=_default_main_group_labels,
    )

    element_group_sections: dict[str, str] = field(
        default_factory=_default_element_group_sections,
    )

    def __post_init__(self):
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")
        if len(self.default_currency) != 3:
            raise ValueError("default_currency must be a 3-letter ISO 4217 code")
        if not self.subtotal_prefix.strip():
            raise ValueError("subtotal_prefix cannot be blank")
        self.default_display_level = DisplayLevel(self.default_display_level)

        valid_types = {t.value for t in AccountType}
        unknown = set(self.section_labels) - valid_types
        if unknown:
            raise ValueError(f"section_labels has unknown account types: {sorted(unknown)}")
        self.section_labels = {**_default_section_labels(), **self.section_labels}
        labels = list(self.section_labels.values())
        if len(set(labels)) != len(labels):
            raise ValueError("section_labels must be distinct")

        bad = {v for v in self.element_group_sections.values() if v not in valid_types}
        if bad:
            raise ValueError(f"element_group_sections maps to unknown account types: {sorted(bad)}")
        self.element_group_sections = {
            k.lower(): v for k, v in self.element_group_sections.items()
        }

    def section_label(self, account_type: AccountType) -> str:
        return self.section_labels[account_type.value]

    def main_group_label(self, kind: MainGroupKind) -> str:
        return self.main_group_labels.get(kind.value, kind.value)

    def section_for_element_group(self, name: str) -> AccountType | None:
        value = self.element_group_sections.get(name.strip().lower())
        return AccountType(value) if value is not None else None

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """
        Load config from a YAML file.

        The file may hold the settings at top level or under a
        ``reporting:`` key.  An empty file yields the defaults.

        Raises:
            FileNotFoundError: if the file does not exist.
            yaml.YAMLError: if the file contains invalid YAML.
            ValueError: if a value fails validation.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"reporting config in {path} must be a mapping")
        if isinstance(data.get("reporting"), dict):
            data = data["reporting"]
        logger.info("reporting_config_loading_from_yaml", extra={"path": str(path)})
        return cls.from_dict(data)
