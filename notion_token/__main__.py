"""
Main entry point for running the package as a module.

Uses the Click-based CLI from notion_token/cli/.
"""
import sys

from notion_token.cli import main

if __name__ == "__main__":
    sys.exit(main())
