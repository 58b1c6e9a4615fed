"""Embedded default configuration files."""

from importlib.resources import files


def read_default(name: str) -> str:
    """Return the text of a bundled default file."""
    return files(__name__).joinpath(name).read_text(encoding="utf-8")
