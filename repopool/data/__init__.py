"""
Configuration, index parsing and the in-memory repository pool.

This package is responsible for:
* Determining the data directory (via env var + sensible default).
* Loading and persisting the pool configuration.
* Parsing repository index files into index documents.
* Admitting configured repositories into the pool and traversing it.
"""
