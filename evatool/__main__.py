import sys

from evatool.convert import main

sys.exit(main())
