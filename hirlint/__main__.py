"""Entry point for ``python -m hirlint``."""

from hirlint.runner import main

if __name__ == "__main__":
    raise SystemExit(main())
