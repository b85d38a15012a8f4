# cleanweb/__main__.py
import sys

from cleanweb.main import main

sys.exit(main())
