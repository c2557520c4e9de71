"""mpris-watch: live report of all MPRIS media players on the session bus."""

from mpris_watch.watch import MprisWatch

__all__ = ["MprisWatch"]
