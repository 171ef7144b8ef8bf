"""Main entry point for the readtrack package."""

from readtrack.cli import app


def main():
    """Run the readtrack command line."""
    app()


if __name__ == "__main__":
    main()
