"""Settings, constants and chart options."""
