"""RPS Duel - a realtime rock/paper/scissors battle server."""

__version__ = "0.1.0"
