import sys

from arrayconf.cli import main

sys.exit(main())
