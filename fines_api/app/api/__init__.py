"""HTTP layer of the Fines API."""
