#!/usr/bin/env python3
"""
Device Catalog Crawler - Entry Point

Crawls a brand -> device catalog into resumable batch checkpoints.

Usage:
    python main.py [site] [options]

Examples:
    python main.py deviceatlas
    python main.py gsmarena --batch-size 10
    python main.py --list-sites

For more options:
    python main.py --help
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from catalog_crawler.crawler import main

if __name__ == "__main__":
    sys.exit(main())
