"""Election Bot: nonpartisan election-information chat service."""

__version__ = "0.1.0"
