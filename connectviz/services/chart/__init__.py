"""Chart controller, engine contract and palette."""
