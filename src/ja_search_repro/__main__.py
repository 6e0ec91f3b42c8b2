import sys

from ja_search_repro.cli import main


sys.exit(main())
