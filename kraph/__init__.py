"""kraph: map the objects of a remote API into a queryable graph.

Pipeline: discover API resources -> list their objects into a Topology
-> materialize the Topology as an in-memory weighted multigraph.
"""

__version__ = "0.1.0"
