import sys

from doh_edge.cli import main

sys.exit(main())
