"""Main entry point when executing stripetools as a package.

This allows running the package using python -m stripetools.
"""

from stripetools.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
