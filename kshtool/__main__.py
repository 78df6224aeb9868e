import sys

from kshtool.cli import main

sys.exit(main())
