"""surepet-cli — command-line client for the SureHub pet-door cloud API.

Lists and mutates pet and flap state and retrieves history through a
strict layered architecture (``core`` / ``infra`` / ``cli``).
"""

from surepet_cli.version import __version__

__all__: list[str] = ["__version__"]
