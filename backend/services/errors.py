"""
Errors raised by location acquisition and place lookup.
"""


class GeolocationError(Exception):
    """Location could not be acquired (IP endpoint or device geolocation)."""


class PlaceLookupError(Exception):
    """The place-lookup collaborator failed (transport, status or parsing)."""
