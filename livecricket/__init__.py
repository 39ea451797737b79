"""
Live Cricket Tracker

Polls a remote cricket score provider, reconstructs ball-by-ball over
history from the play-by-play feed, and publishes only material changes
at a cadence driven by the match lifecycle.
"""

__version__ = "0.1.0"
