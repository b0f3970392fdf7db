import sys

from obsidian2web.cli import main

sys.exit(main())
