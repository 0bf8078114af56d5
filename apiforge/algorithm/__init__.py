"""Generic graph and collection helpers used by the code generator."""

from apiforge.algorithm.ordered_set import OrderedSet
from apiforge.algorithm.topology import Topology

__all__ = ['OrderedSet', 'Topology']
