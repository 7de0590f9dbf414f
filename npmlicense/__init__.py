"""npmlicense - license classification for installed npm dependency trees."""

__version__ = "0.1.0"
