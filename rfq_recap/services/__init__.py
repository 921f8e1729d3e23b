"""Services: column resolution, normalization, filtering, aggregation and loading."""
