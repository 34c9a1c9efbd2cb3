"""Send a single email over SMTP with optional STARTTLS and one attachment."""

__version__ = "0.1.0"
