"""Allow ``python -m auto_changelog``."""

from auto_changelog.cli.app import main

if __name__ == "__main__":
    main()
