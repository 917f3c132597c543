"""Main entry point when executing dircontacts as a package.

This allows running the package using python -m dircontacts.
"""

from dircontacts.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
