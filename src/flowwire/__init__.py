"""
Flowwire: typed handle compatibility and node activation for node-graph editors.

Decides which edges between typed ports are legal, removes edges that
break the rules, and computes which nodes are active given their own
data and their upstream neighbors.
"""

__version__ = "0.1.0"
