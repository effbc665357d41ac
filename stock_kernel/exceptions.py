"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Controlled-drug stock must never drift silently. Callers (forms, the CLI,
the sync indicator) need to react to a failure by its kind, not by parsing
a message string:

    try:
        service.check_out(drug_id, quantity=12, location="E4")
    except InvalidQuantityError as e:
        show_error(f"Only {e.limit} available")   # Structured data
        api_response(code=e.code)                 # Machine-readable

Every exception has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA stored as attributes (survives logging/serialization)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- LedgerError
    |   +-- InvalidQuantityError
    |   +-- DrugNotFoundError
    |   +-- DuplicateDrugError
    |   +-- InvalidDrugError
    |
    +-- PersistenceError
    |   +-- RemoteUnavailableError
    |   +-- RemoteMalformedError
    |   +-- CacheEmptyError
    |   +-- CacheCorruptError
    |
    +-- ConfigError
    |   +-- ConfigIncompleteError
    |
    +-- ImportInvalidError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                 | When Raised
-------------|----------------------|--------------------------------------------
Ledger       | INVALID_QUANTITY     | Action quantity violates its precondition
             | DRUG_NOT_FOUND       | Action targets an unknown drug id
             | DUPLICATE_DRUG       | Adding a drug whose id already exists
             | INVALID_DRUG         | Drug fields malformed (name, presentation)
-------------|----------------------|--------------------------------------------
Persistence  | REMOTE_UNAVAILABLE   | Network error or non-success HTTP status
             | REMOTE_MALFORMED     | Remote response unparsable or wrong shape
             | CACHE_EMPTY          | Local cache has no entry for the key
             | CACHE_CORRUPT        | Local cache entry is not a valid collection
-------------|----------------------|--------------------------------------------
Config       | CONFIG_INCOMPLETE    | Missing API key or bin identifier
-------------|----------------------|--------------------------------------------
Import       | IMPORT_INVALID       | Bulk import malformed or schema-violating
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Ledger exceptions


class LedgerError(StockKernelError):
    """Base exception for stock ledger mutations."""

    code: str = "LEDGER_ERROR"


class InvalidQuantityError(LedgerError):
    """
    An action quantity violates the precondition for its action type.

    ``limit`` is the upper bound the quantity was checked against
    (``available`` for check-out and OOD, ``ood`` for pharmacy returns),
    or None when only positivity/non-negativity applies.
    """

    code: str = "INVALID_QUANTITY"

    def __init__(
        self,
        action: str,
        quantity: object,
        reason: str,
        limit: int | None = None,
    ):
        self.action = action
        self.quantity = quantity
        self.reason = reason
        self.limit = limit
        super().__init__(f"Invalid quantity {quantity!r} for {action}: {reason}")


class DrugNotFoundError(LedgerError):
    """No drug with the given id exists in the collection."""

    code: str = "DRUG_NOT_FOUND"

    def __init__(self, drug_id: str):
        self.drug_id = drug_id
        super().__init__(f"Drug not found: {drug_id}")


class DuplicateDrugError(LedgerError):
    """A drug with the given id already exists in the collection."""

    code: str = "DUPLICATE_DRUG"

    def __init__(self, drug_id: str):
        self.drug_id = drug_id
        super().__init__(f"Drug already exists: {drug_id}")


class InvalidDrugError(LedgerError):
    """Drug descriptive fields are malformed."""

    code: str = "INVALID_DRUG"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid drug {field} {value!r}: {reason}")


# Persistence exceptions


class PersistenceError(StockKernelError):
    """Base exception for load/save failures."""

    code: str = "PERSISTENCE_ERROR"


class RemoteUnavailableError(PersistenceError):
    """The remote store could not be reached or answered with an error status."""

    code: str = "REMOTE_UNAVAILABLE"

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ):
        self.operation = operation
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Remote store {operation} failed: {reason}")


class RemoteMalformedError(PersistenceError):
    """The remote store answered, but the payload could not be interpreted."""

    code: str = "REMOTE_MALFORMED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Remote store {operation} returned malformed data: {reason}")


class CacheEmptyError(PersistenceError):
    """The local cache holds no entry for the requested key."""

    code: str = "CACHE_EMPTY"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Local cache has no entry for {key}")


class CacheCorruptError(PersistenceError):
    """The local cache entry exists but is not a valid drug collection."""

    code: str = "CACHE_CORRUPT"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Local cache entry {key} is corrupt: {reason}")


# Configuration exceptions


class ConfigError(StockKernelError):
    """Base exception for remote store configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigIncompleteError(ConfigError):
    """A required credential or identifier is missing."""

    code: str = "CONFIG_INCOMPLETE"

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Remote store configuration incomplete: missing {', '.join(missing)}")


# Import exceptions


class ImportInvalidError(StockKernelError):
    """A bulk import payload is malformed or violates the drug schema."""

    code: str = "IMPORT_INVALID"

    def __init__(self, reason: str, index: int | None = None):
        self.reason = reason
        self.index = index
        where = f" (drug #{index})" if index is not None else ""
        super().__init__(f"Import rejected{where}: {reason}")
