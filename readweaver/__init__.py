#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Package initialization and version metadata.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

from .version import __version__

__all__ = ["__version__"]

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
