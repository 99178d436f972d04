"""
Entry point for running docxblocks as a module.

Usage:
    python -m docxblocks render template.docx job.json --output out.docx
    python -m docxblocks variables template.docx
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
