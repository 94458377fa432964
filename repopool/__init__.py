"""
Repository pool service.

Loads the package indexes of the configured repositories once, keeps them in
configuration order, and answers lookups across them.
"""
