"""
Main interface for user/developer of bplusviz.

Utility to start repl and run commands.

Requires bplusviz to be installed.
"""

import sys

from bplusviz import parse_args_and_start


if __name__ == '__main__':
    parse_args_and_start(sys.argv[1:])
