"""Command line entry for the rental desk menu."""

from cli.menu import main

if __name__ == "__main__":
    raise SystemExit(main())
