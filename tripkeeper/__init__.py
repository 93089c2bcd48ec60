# Tripkeeper - local persistence and media ingestion for travel records

__version__ = "0.1.0"
