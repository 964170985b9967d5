"""Entry point for 'python -m secretsanta' command.

This module allows the SecretSanta CLI to be invoked using
'python -m secretsanta'.
"""

from secretsanta.cli import main

if __name__ == "__main__":
    main()
