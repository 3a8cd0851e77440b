"""
ReShader - installs ReShade and GShade presets into games on Linux.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

__version__ = "2.0.0"
