# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Allow running kvstream as a module: python -m kvstream
"""

from kvstream.cli import main

if __name__ == "__main__":
    main()
