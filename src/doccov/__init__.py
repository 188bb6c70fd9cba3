"""doccov - documentation coverage for JavaScript and TypeScript projects."""

try:
    from importlib.metadata import version

    __version__ = version("doccov")
except Exception:
    __version__ = "0.0.0.dev0+local"  # Fallback for development
