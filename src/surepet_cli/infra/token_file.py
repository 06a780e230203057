"""Infrastructure: the persisted bearer-token file.

A single plain-text file holding only the token.  Absence is normal;
corruption is only noticed when the API rejects the token.

Rules
-----
* Writes replace the whole file and restrict it to the owner.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class TokenFile:
    """Concrete :class:`~surepet_cli.core.protocols.TokenStorage`.

    This class satisfies the protocol structurally — no explicit
    inheritance required.
    """

    def __init__(self, path: Path) -> None:
        self.path: Path = path.expanduser()

    def read(self) -> str | None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No token file at %s", self.path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read token file %s: %s", self.path, exc)
            return None
        token = text.strip()
        return token or None

    def write(self, token: str) -> None:
        """Overwrite the file with *token*, created owner-only.

        Raises
        ------
        OSError
            When the file cannot be written.
        """
        logger.debug("Saving token to %s", self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # mode only applies on creation; tighten a pre-existing file too
        try:
            os.chmod(self.path, 0o600)
        except OSError as exc:
            logger.debug("Cannot restrict token file permissions: %s", exc)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(token)

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.debug("Token file doesn't exist, nothing to delete")
            return
        logger.debug("Deleted token file %s", self.path)

    def exists(self) -> bool:
        return self.read() is not None
