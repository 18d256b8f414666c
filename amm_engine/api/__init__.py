"""Query API."""
