"""voicegen - incremental telephony voice prompt generation."""

__version__ = "0.1.0"
__all__ = ["build"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "build":
        from .api import build

        return build
    raise AttributeError(f"module 'voicegen' has no attribute {name!r}")
