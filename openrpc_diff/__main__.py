import sys

from openrpc_diff.main import main

sys.exit(main())
