"""Entry point for running voicegen as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the voicegen CLI application."""
    app()


if __name__ == "__main__":
    main()
