"""ttlshortener: short links with expiry, lazy reclamation and bulk sweeps."""

__version__ = '0.1.0'
