"""
Relation Metadata Module.

Small lookups about relations that the feature pipeline consults, currently
just which relation is the inverse of which (so that both the predicted
relation and its inverse are hidden between an instance's own endpoints).
"""

from typing import Any, Dict, Optional

from ..utils.params import as_params, ensure_no_extras


class RelationMetadata:
    """
    Per-relation metadata.

    Example:
        >>> metadata = RelationMetadata({'plays_for': 'has_player'})
        >>> metadata.get_inverse('has_player')
        'plays_for'
    """

    def __init__(self, inverses: Optional[Dict[str, str]] = None):
        self.inverses: Dict[str, str] = {}
        for relation, inverse in (inverses or {}).items():
            self.inverses[relation] = inverse
            self.inverses.setdefault(inverse, relation)

    @classmethod
    def empty(cls) -> 'RelationMetadata':
        return cls()

    @classmethod
    def from_params(cls, params: Optional[Any]) -> 'RelationMetadata':
        """Build from the ``relation_metadata`` config block."""
        params = as_params(params, 'relation_metadata')
        ensure_no_extras(params, 'relation_metadata', ['inverses'])
        return cls(params.get('inverses'))

    def get_inverse(self, relation: str) -> Optional[str]:
        return self.inverses.get(relation)
