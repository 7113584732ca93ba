"""Entry point for running the Broadside simulator."""

from .cli import main

if __name__ == "__main__":
    main()
