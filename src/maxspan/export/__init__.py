"""CSV projections of contracts, positions and contributors."""
