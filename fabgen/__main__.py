"""Entry point for ``python -m fabgen``."""

from fabgen.cli import main

if __name__ == "__main__":
    main()
