"""Tabby — export interactive projects as runnable bundles.

Packages a project description into a bundle for one of several targets:
a hot-reloadable browser preview, a Cordova (mobile) shell, an Electron
(desktop) shell, or a Facebook Instant Games shell.

Quick start::

    import tabby

    tabby.preview("game.yaml", "build/preview")
    tabby.package("electron", "game.yaml", "build/desktop")

Programmatic use::

    from tabby import Exporter, TabbyConfig
    from tabby.project import load_project

    exporter = Exporter(TabbyConfig(root=workspace))
    result = exporter.export_for_preview(load_project(path), output_root)
    result.raise_for_error()

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "ExportRequest",
    "ExportResult",
    "Exporter",
    "TabbyConfig",
    "__version__",
    "data",
    "package",
    "preview",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tabby`` fast while providing a clean top-level API.
    """
    if name == "TabbyConfig":
        from tabby.config import TabbyConfig

        return TabbyConfig

    if name in ("Exporter", "ExportRequest", "ExportResult"):
        from tabby import export

        return getattr(export, name)

    if name in ("preview", "package", "data"):
        from tabby import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
