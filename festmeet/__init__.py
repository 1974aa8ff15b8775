"""festmeet: find times to meet up at a music festival.

Reads festival-app schedule screenshots, extracts each person's sets, and
proposes ranked meetup windows for the group.
"""

__version__ = "0.1.0"
