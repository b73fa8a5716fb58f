import sys

from vttpreview.cli import main

sys.exit(main())
