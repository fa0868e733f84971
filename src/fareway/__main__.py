import sys

from fareway.cli import main

sys.exit(main())
