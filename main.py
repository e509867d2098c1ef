"""
Entry point for PetAdopt.
Runs the interactive pet adoption menu in the terminal.
"""

import os
import sys

if __name__ == "__main__":
    # Ensure the current directory is in sys.path so imports work correctly
    root_dir = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, root_dir)

    from petadopt.app import main

    sys.exit(main())
