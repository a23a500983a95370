import sys

from ormbench.cli import main

sys.exit(main())
