"""Entry point for running pveclient as a module.

This allows the CLI to be run with:
    python -m pveclient
"""

from pveclient.cli import main

if __name__ == "__main__":
    main()
