"""Main entry point for payguard.

Classifies captured payment messages from the command line; see
``python main.py --help``.
"""
import sys

from payguard.cli import main

if __name__ == '__main__':
    sys.exit(main())
