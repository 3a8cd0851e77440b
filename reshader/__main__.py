"""
Allows running the installer with ``python -m reshader``.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

import sys

from reshader.cli import main

if __name__ == "__main__":
    sys.exit(main())
