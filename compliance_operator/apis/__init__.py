"""API types consumed by the compliance operator controllers."""
