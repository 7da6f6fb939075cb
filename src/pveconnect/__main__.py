"""Entry point for running pveconnect as a module.

This allows running the CLI with:
    python -m pveconnect
"""

from pveconnect.cli.main import main

if __name__ == "__main__":
    main()
