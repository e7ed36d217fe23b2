"""payguard: validation and de-duplication of mobile-money payment notifications."""

__version__ = "0.1.0"
