import sys

from contrib_graph.cli import main

sys.exit(main())
