"""whisk: keep a short list of project directories and browse it in the terminal.

Subpackages:
    store: JSON-backed project records.
    config: Layered YAML configuration.
    ui: Screen state machine and rich renderer.
"""

from importlib import metadata as _metadata

__all__ = ["__version__"]


def __getattr__(name: str):
    # Resolved lazily so importing whisk never touches package metadata.
    if name != "__version__":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    try:
        return _metadata.version(__name__)
    except _metadata.PackageNotFoundError:
        return "0+unknown"
