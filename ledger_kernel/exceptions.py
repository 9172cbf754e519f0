"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Report generation must fail loudly and precisely.  An account that cannot be
placed in the chart-of-accounts hierarchy would silently unbalance a
statement if it were skipped, so every failure is a typed exception that
callers catch by type, never by message text.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - RIGHT way:
    try:
        report = service.balance_sheet(tenant_id, as_of)
    except ChainResolutionError as e:
        api_response(code=e.code, account=e.account_id, level=e.level)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- IntegrityError
    |   +-- ChainResolutionError
    |   +-- SectionMismatchError
    |   +-- HierarchyLevelError
    |
    +-- IngestionError
    |   +-- MalformedBalanceError
    |   +-- InvalidAccountTypeError
    |
    +-- ExportError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Integrity       | CHAIN_UNRESOLVED            | Ancestor chain missing a group/level
                | SECTION_MISMATCH            | Account type not allowed in its main group
                | HIERARCHY_LEVEL_MISMATCH    | Node attached under the wrong level
----------------|-----------------------------|-----------------------------------------
Ingestion       | MALFORMED_BALANCE           | Balance is missing, non-numeric, non-finite
                | INVALID_ACCOUNT_TYPE        | Unknown account type string
----------------|-----------------------------|-----------------------------------------
Export          | EXPORT_FAILED               | Renderer could not produce the document

===============================================================================
HANDLING PATTERNS
===============================================================================

1. INTEGRITY ERRORS ARE FATAL FOR THE REPORT:

    except IntegrityError as e:
        # Never render a partial statement
        log.error("report_failed", extra={"code": e.code})
        raise

2. EXPORT ERRORS NEVER TRIGGER A RECOMPUTE:

    except ExportError as e:
        # The rows are still valid; only the rendering failed
        return rows_as_json(report)
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Integrity exceptions


class IntegrityError(LedgerKernelError):
    """Base exception for chart-of-accounts data-integrity errors."""

    code: str = "INTEGRITY_ERROR"


class ChainResolutionError(IntegrityError):
    """
    Account's ancestor chain cannot be fully resolved.

    Raised when the DetailedGroup (or any ancestor) is missing, when a
    parent reference points at the wrong level, when the chain does not end
    at a recognised MainGroup, or when a pre-joined group name disagrees
    with the walked chain.
    """

    code: str = "CHAIN_UNRESOLVED"

    def __init__(
        self,
        account_id: str,
        level: str,
        missing_id: str | None = None,
        reason: str | None = None,
    ):
        self.account_id = account_id
        self.level = level
        self.missing_id = missing_id
        self.reason = reason
        detail = reason or f"missing {level} group {missing_id!r}"
        super().__init__(
            f"Cannot resolve ancestor chain for account {account_id}: {detail}"
        )


class SectionMismatchError(IntegrityError):
    """Account type does not belong to the report its main group designates."""

    code: str = "SECTION_MISMATCH"

    def __init__(self, account_id: str, account_type: str, main_group: str):
        self.account_id = account_id
        self.account_type = account_type
        self.main_group = main_group
        super().__init__(
            f"Account {account_id} of type {account_type} "
            f"cannot appear under main group {main_group}"
        )


class HierarchyLevelError(IntegrityError):
    """A hierarchy node was attached under a parent of the wrong level."""

    code: str = "HIERARCHY_LEVEL_MISMATCH"

    def __init__(self, parent_level: str, child_level: str):
        self.parent_level = parent_level
        self.child_level = child_level
        super().__init__(
            f"Cannot attach a {child_level} node under a {parent_level} node"
        )


# Ingestion exceptions


class IngestionError(LedgerKernelError):
    """Base exception for rejected collaborator payloads."""

    code: str = "INGESTION_ERROR"


class MalformedBalanceError(IngestionError):
    """Balance is missing, non-numeric, or not a finite decimal."""

    code: str = "MALFORMED_BALANCE"

    def __init__(self, account_id: str, raw_value: object):
        self.account_id = account_id
        self.raw_value = repr(raw_value)
        super().__init__(
            f"Malformed balance for account {account_id}: {raw_value!r}"
        )


class InvalidAccountTypeError(IngestionError):
    """Account type is not one of asset/liability/equity/revenue/expense."""

    code: str = "INVALID_ACCOUNT_TYPE"

    def __init__(self, account_id: str, account_type: object):
        self.account_id = account_id
        self.account_type = repr(account_type)
        super().__init__(
            f"Invalid account type for account {account_id}: {account_type!r}"
        )


# Export exceptions


class ExportError(LedgerKernelError):
    """A renderer failed to produce its document from the report rows."""

    code: str = "EXPORT_FAILED"

    def __init__(self, export_format: str, reason: str):
        self.export_format = export_format
        self.reason = reason
        super().__init__(f"{export_format} export failed: {reason}")
