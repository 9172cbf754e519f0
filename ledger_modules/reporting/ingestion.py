"""
Ingestion -- collaborator payloads to typed records.

Responsibility:
    Validates and converts the raw rows handed over by the storage
    collaborator (JSON-style mappings) into ``AccountBalanceRecord`` and
    ``GroupRecord`` values.  This is the only place a balance is parsed;
    everything downstream assumes a finite ``Decimal``.

Architecture position:
    Modules > Reporting -- pure, ZERO I/O.

Invariants enforced:
    * Keys may use the camelCase wire names (``accountId``,
      ``detailedGroupId``, ...) or snake_case.
    * Balances are parsed with ``Decimal(str(value))``; floats never leak
      through in binary form.
    * Missing, non-numeric, NaN and infinite balances are rejected.
    * Booleans are not numbers here.

Failure modes:
    * ``MalformedBalanceError`` for a bad balance.
    * ``InvalidAccountTypeError`` for an unknown account type.
    * ``ValueError`` for a row missing an identifying field.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from ledger_kernel.domain.chart import AccountBalanceRecord, AccountType, GroupRecord
from ledger_kernel.domain.hierarchy import GroupLevel
from ledger_kernel.exceptions import InvalidAccountTypeError, MalformedBalanceError
from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.ingestion")

_MISSING = object()

_ACCOUNT_FIELDS = {
    "account_id": ("accountId", "account_id", "id"),
    "account_code": ("accountCode", "account_code"),
    "account_name": ("accountName", "account_name"),
    "account_type": ("accountType", "account_type"),
    "balance": ("balance",),
    "detailed_group_id": ("detailedGroupId", "detailed_group_id"),
    "sub_element_group_name": ("subElementGroupName", "sub_element_group_name"),
    "element_group_name": ("elementGroupName", "element_group_name"),
    "main_group_name": ("mainGroupName", "main_group_name"),
}


def _lookup(row: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        if name in row:
            return row[name]
    return _MISSING


def _optional_str(value: Any) -> str | None:
    if value is _MISSING or value is None:
        return None
    return str(value)


def _required_str(row: Mapping[str, Any], field: str, names: tuple[str, ...]) -> str:
    value = _lookup(row, names)
    if value is _MISSING or value is None or not str(value).strip():
        raise ValueError(f"row is missing required field {field!r}")
    return str(value)


def parse_balance(account_id: str, raw: Any) -> Decimal:
    """
    Parse one balance into a finite Decimal.

    Raises:
        MalformedBalanceError: missing, boolean, non-numeric or non-finite.
    """
    if raw is _MISSING or raw is None or isinstance(raw, bool):
        raise MalformedBalanceError(account_id, None if raw is _MISSING else raw)
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float, str)):
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            raise MalformedBalanceError(account_id, raw) from None
    else:
        raise MalformedBalanceError(account_id, raw)
    if not value.is_finite():
        raise MalformedBalanceError(account_id, raw)
    return value


def parse_account_type(account_id: str, raw: Any) -> AccountType:
    if isinstance(raw, AccountType):
        return raw
    try:
        return AccountType(str(raw).strip().lower())
    except ValueError:
        raise InvalidAccountTypeError(account_id, raw) from None


def ingest_account_record(row: Mapping[str, Any]) -> AccountBalanceRecord:
    """Convert one account row; see module docstring for accepted keys."""
    f = _ACCOUNT_FIELDS
    account_id = _required_str(row, "account_id", f["account_id"])
    return AccountBalanceRecord(
        account_id=account_id,
        account_code=_required_str(row, "account_code", f["account_code"]),
        account_name=_required_str(row, "account_name", f["account_name"]),
        account_type=parse_account_type(account_id, _lookup(row, f["account_type"])),
        balance=parse_balance(account_id, _lookup(row, f["balance"])),
        detailed_group_id=_optional_str(_lookup(row, f["detailed_group_id"])),
        sub_element_group_name=_optional_str(_lookup(row, f["sub_element_group_name"])),
        element_group_name=_optional_str(_lookup(row, f["element_group_name"])),
        main_group_name=_optional_str(_lookup(row, f["main_group_name"])),
    )


def ingest_account_records(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[AccountBalanceRecord, ...]:
    """Convert account rows in order; the first bad row raises."""
    records = tuple(ingest_account_record(row) for row in rows)
    logger.debug("account_records_ingested", extra={"record_count": len(records)})
    return records


def ingest_group_records(
    rows: Iterable[Mapping[str, Any]],
    level: GroupLevel | str | None = None,
) -> tuple[GroupRecord, ...]:
    """
    Convert group rows ``{id, name, parentId, level}``.

    ``level`` applies to every row when given; otherwise each row names
    its own level.  A MainGroup row never carries a parent.
    """
    fixed_level = GroupLevel(level) if level is not None else None
    records = []
    for row in rows:
        group_id = _required_str(row, "id", ("id",))
        row_level = fixed_level or GroupLevel(_required_str(row, "level", ("level",)))
        parent_id = _optional_str(_lookup(row, ("parentId", "parent_id")))
        if row_level is GroupLevel.MAIN and parent_id is not None:
            raise ValueError(f"main group {group_id!r} cannot have a parent")
        records.append(
            GroupRecord(
                id=group_id,
                name=_required_str(row, "name", ("name",)),
                level=row_level,
                parent_id=parent_id,
            )
        )
    logger.debug("group_records_ingested", extra={"record_count": len(records)})
    return tuple(records)
