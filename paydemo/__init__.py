"""paydemo: payment checkout demo service with verified provider webhooks."""

__version__ = "0.1.0"
