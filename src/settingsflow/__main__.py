"""Entry point for running settingsflow as a module.

    python -m settingsflow encrypt -t TEXT -c CERTIFICATE
"""

from settingsflow.cli import main

if __name__ == "__main__":
    main()
