"""Allow ``python -m glideapi``."""

from glideapi.cli import main

if __name__ == "__main__":
    main()
