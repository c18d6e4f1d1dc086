"""Module entrypoint for ``python -m lazycmd``.

All argument parsing and runtime setup happen in ``lazycmd.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
