"""Chart engine adapters."""
