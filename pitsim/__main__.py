import sys

from pitsim.main import main

sys.exit(main())
