"""Run the py-http command with ``python -m py_http``."""

from py_http.cli import main

raise SystemExit(main())
