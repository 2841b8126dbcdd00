#!/usr/bin/env python3
"""
PJUD Case Scraper - Main Entry Point

Looks up a case on the PJUD virtual judicial office and prints its most
recent history entries and pending writings.

Usage:
    python main.py --competencia Civil --corte "C.A. de Santiago" \
        --tribunal "5° Juzgado Civil de Santiago" --libro C --rol 2011 --ano 2022
"""

import sys

from pjud_scraper.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
