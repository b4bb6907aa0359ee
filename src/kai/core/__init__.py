"""Core logic for kai: scanning, recency, matching and selection state."""
