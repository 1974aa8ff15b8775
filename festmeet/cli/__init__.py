"""Command-line tools for festmeet.

- ``python -m festmeet.cli.meetups`` -- read a group's schedule screenshots
  and print ranked meetup candidates.
"""
