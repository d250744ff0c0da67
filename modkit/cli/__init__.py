"""
modkit command-line interface.

Usage:
    modkit import      import every package and report
    modkit order       show the processing order
    modkit inspect     per-package validity and fingerprint
    modkit graph       dependency graph as DOT
"""

from .. import __version__

__cli_name__ = "modkit"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
