"""
Experiments Module.

Output sinks, relation metadata and the multi-relation driver.

Classes:
    Outputter: Writes matrices, scores, weights and path counts; logs progress
    RelationMetadata: Inverse-relation lookups

The driver lives in pra.experiments.driver (it depends on the operations,
which depend on this package).
"""

from .outputter import Outputter
from .relation_metadata import RelationMetadata

__all__ = [
    'Outputter',
    'RelationMetadata',
]
