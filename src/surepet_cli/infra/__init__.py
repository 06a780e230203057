"""Infrastructure layer — external system integration.

This layer wraps all interaction with the SureHub cloud (via httpx) and
the local filesystem.  Every raw third-party exception must be caught
here and re-raised as a :class:`~surepet_cli.exceptions.SurePetError`
subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from surepet_cli.infra.export_file import ExportFile
from surepet_cli.infra.surehub_client import SureHubClient, build_http_client
from surepet_cli.infra.token_file import TokenFile

__all__: list[str] = [
    "ExportFile",
    "SureHubClient",
    "TokenFile",
    "build_http_client",
]
