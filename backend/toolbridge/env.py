"""Environment loading helpers.

Not invoked at import time. Entrypoints call them explicitly so tests stay
free of side effects.
"""

from __future__ import annotations

from dotenv import find_dotenv, load_dotenv


def load_dotenv_if_present() -> None:
    """Load environment variables from a .env file if available.

    Values already present in the environment win over the file.
    """

    dotenv_path = find_dotenv(filename=".env", usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)
