"""
Map Locations Service.

Serves the geo-tagged map location records from MongoDB through an
in-memory snapshot that is filled on first read and refreshed on a
fixed interval.
"""
