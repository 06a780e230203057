"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O; both arrive through the protocols in
  :mod:`surepet_cli.core.protocols`.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from surepet_cli.core.dispatcher import (
    CommandDispatcher,
    CommandFailure,
    CommandRequest,
    CommandResult,
    CommandSuccess,
)
from surepet_cli.core.models import (
    AmbiguousMatch,
    Credential,
    CredentialSource,
    Device,
    ExportBundle,
    ExportFormat,
    ExportKind,
    HistoryKind,
    HistoryRecord,
    HistoryReport,
    Location,
    LockMode,
    MutationReceipt,
    NoMatch,
    Pet,
    PetClass,
    RangeSpec,
    UniqueMatch,
)
from surepet_cli.core.protocols import (
    ApiSession,
    ExportWriter,
    InteractiveLogin,
    SessionFactory,
    TokenStorage,
)
from surepet_cli.core.range_parser import parse_range
from surepet_cli.core.resolver import resolve
from surepet_cli.core.session_store import SessionStore

__all__: list[str] = [
    "AmbiguousMatch",
    "ApiSession",
    "CommandDispatcher",
    "CommandFailure",
    "CommandRequest",
    "CommandResult",
    "CommandSuccess",
    "Credential",
    "CredentialSource",
    "Device",
    "ExportBundle",
    "ExportFormat",
    "ExportKind",
    "ExportWriter",
    "HistoryKind",
    "HistoryRecord",
    "HistoryReport",
    "InteractiveLogin",
    "Location",
    "LockMode",
    "MutationReceipt",
    "NoMatch",
    "Pet",
    "PetClass",
    "RangeSpec",
    "SessionFactory",
    "SessionStore",
    "TokenStorage",
    "UniqueMatch",
    "parse_range",
    "resolve",
]
