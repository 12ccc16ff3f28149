import sys

from textpost.cli import main

sys.exit(main())
