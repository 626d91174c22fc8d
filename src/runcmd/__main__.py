"""
Main entry point for runcmd.

This module allows runcmd to be run as:
    python -m runcmd
"""

from .cli import main

if __name__ == "__main__":
    main()
