"""
AssetGraph — attack surface asset graph analysis.

Walks an asset graph populated by an external discovery engine to list the
names, addresses and ASNs discovered for a set of root domains, report names
that are new since a cutoff, and project the related entities into nodes and
edges for visualization.

License: MIT
"""

__version__ = "0.1.0"
