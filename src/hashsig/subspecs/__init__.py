"""Building blocks of the hash-based signature schemes."""
