"""Geographic features, world projections and camera fitting."""
