"""Allow ``python -m fluxtrace``."""

from fluxtrace.cli import main

if __name__ == "__main__":
    main()
