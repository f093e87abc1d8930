"""Module entrypoint for ``python -m cwdtree``.

All argument parsing and runtime setup happen in ``cwdtree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
