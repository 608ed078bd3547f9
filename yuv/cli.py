#!/usr/bin/env python3

"""
Command-line interface wrapper for yuv.

Entry point for the console script installed by pip.
"""

import sys


def main():
    """Entry point for the yuv CLI command."""
    from .main import main as main_func
    return main_func()


if __name__ == "__main__":
    sys.exit(main())
