"""domainctl: pay-to-register namespace registry."""

__version__ = "0.3.0"
