"""Allow ``python -m worldclock``."""

from worldclock.cli import app

if __name__ == "__main__":
    app()
