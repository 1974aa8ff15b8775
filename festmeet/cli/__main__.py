"""Allow ``python -m festmeet.cli`` execution."""

import sys

from festmeet.cli.meetups import main

sys.exit(main())
