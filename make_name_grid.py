#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Build a name tag grid SVG from a template and a list of names.
"""

import svg_name_grid.cli


if __name__ == "__main__":
	svg_name_grid.cli.main()
