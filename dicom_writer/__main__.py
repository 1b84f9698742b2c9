# SPDX-License-Identifier: GPL-2.0-only
"""
dicom_writer package main entry point.

This allows running the package as:
    python -m dicom_writer INPUT OUTPUT --set TAG=VALUE

Which is equivalent to:
    python -m dicom_writer.cli INPUT OUTPUT --set TAG=VALUE
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
