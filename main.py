"""
Bravo CLI 入口点

示例:
    python main.py organizations
    python main.py cards --widget-id <widgetCommonId> --limit 20
"""

import sys

from bravo.cli import main

if __name__ == "__main__":
    sys.exit(main())
