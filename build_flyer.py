#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Build a nightlife flyer from a logo manifest.
"""

# local repo modules
import night_flyer.cli


if __name__ == "__main__":
	night_flyer.cli.main()
