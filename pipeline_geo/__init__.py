"""Pipeline geospatial aggregation and route-rendering pipeline."""

__version__ = "0.1.0"
