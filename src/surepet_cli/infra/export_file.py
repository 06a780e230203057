"""Infrastructure: writing export bundles as CSV or JSON files.

Rules
-----
* ``OSError`` is mapped to :class:`~surepet_cli.exceptions.ExportError`.
* The CSV table is chosen before the file is opened, so an empty
  export leaves nothing behind.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from surepet_cli.core.export import csv_table, default_filename, export_document
from surepet_cli.core.models import ExportBundle, ExportFormat
from surepet_cli.exceptions import ExportError

logger = logging.getLogger(__name__)


class ExportFile:
    """Concrete :class:`~surepet_cli.core.protocols.ExportWriter`.

    Parameters
    ----------
    directory:
        Where default-named exports land; the working directory when
        omitted.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory: Path = directory if directory is not None else Path.cwd()

    def write(self, bundle: ExportBundle, fmt: ExportFormat, path: Path | None) -> Path:
        target = path.expanduser() if path is not None else self.directory / default_filename(bundle, fmt)
        logger.debug("Writing %s export to %s", fmt.value, target)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if fmt is ExportFormat.JSON:
                text = json.dumps(export_document(bundle), indent=2, ensure_ascii=False)
                target.write_text(text + "\n", encoding="utf-8")
            else:
                fields, rows = csv_table(bundle)
                with target.open("w", newline="", encoding="utf-8") as handle:
                    writer = csv.DictWriter(handle, fieldnames=fields)
                    writer.writeheader()
                    writer.writerows(rows)
        except OSError as exc:
            raise ExportError(
                f"Cannot write export file {target}: {exc.strerror or exc}",
                hint="Check that the directory exists and is writable.",
            ) from exc
        return target
