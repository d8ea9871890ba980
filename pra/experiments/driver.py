"""
Experiment Driver Module.

Runs one configured operation over a list of relations: loads the graph
and split named in the config, validates the operation block once up
front, then runs the operation for each relation with its own output
directory.
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..data.split import DatasetSplit
from ..errors import ConfigurationError, PraError
from ..graphs.graph import NetworkXGraph
from ..operations import create_operation
from ..utils.params import as_params, ensure_no_extras, get_sub_params
from .outputter import Outputter
from .relation_metadata import RelationMetadata

CONFIG_KEYS = ['paths', 'relations', 'relation_metadata', 'operation']
PATH_KEYS = ['graph', 'split', 'results']


class Driver:
    """
    Multi-relation experiment runner.

    Example:
        >>> from config import load_config
        >>> driver = Driver(load_config('config/default.yaml'))
        >>> driver.run()
    """

    def __init__(self, config: Dict[str, Any], verbose: bool = True):
        """
        Initialize driver.

        Args:
            config: Full experiment configuration
            verbose: Whether to print progress messages

        Raises:
            ConfigurationError: for unrecognized top-level or path keys
        """
        self.config = as_params(config, 'config')
        ensure_no_extras(self.config, 'config', CONFIG_KEYS)
        self.paths = get_sub_params(self.config, 'paths')
        ensure_no_extras(self.paths, 'paths', PATH_KEYS)
        if 'split' not in self.paths:
            raise ConfigurationError("'paths' must name a 'split' directory")

        self.verbose = verbose
        self.operation_params = get_sub_params(self.config, 'operation')
        self.relation_metadata = RelationMetadata.from_params(self.config.get('relation_metadata'))

        graph_path = self.paths.get('graph')
        self.graph = NetworkXGraph.from_tsv_file(graph_path) if graph_path else None
        self.split = DatasetSplit(self.paths['split'])
        self.outputter = Outputter(self.paths.get('results'), graph=self.graph, verbose=verbose)

        # Validate the operation before any relation runs.
        create_operation(self.operation_params, self.graph, self.split,
                         self.relation_metadata, Outputter.just_logger(verbose=False))

    def get_relations(self, relations: Optional[Sequence[str]] = None) -> List[str]:
        """Relations to run: explicit list, else config, else every split directory."""
        if relations:
            return list(relations)
        configured = self.config.get('relations')
        if configured:
            return [configured] if isinstance(configured, str) else list(configured)
        return list(self.split.relations())

    def run(self, relations: Optional[Sequence[str]] = None) -> None:
        """Run the operation for each relation."""
        relations = self.get_relations(relations)
        if self.graph is not None:
            stats = self.graph.get_statistics()
            self.outputter.info(
                f"Graph: {stats['num_nodes']:,} nodes, {stats['num_edges']:,} edges, "
                f"{stats['num_edge_types']} relations"
            )
        start = time.time()
        for relation in relations:
            relation_outputter = self.outputter.for_relation(relation)
            relation_outputter.info(f"Running relation {relation}")
            operation = create_operation(self.operation_params, self.graph, self.split,
                                         self.relation_metadata, relation_outputter)
            relation_start = time.time()
            try:
                operation.run_relation(relation)
            except PraError:
                raise
            except Exception as e:
                raise PraError(f"Running relation {relation} failed: {e}") from e
            relation_outputter.info(
                f"Finished relation {relation} in {time.time() - relation_start:.1f} seconds"
            )
        self.outputter.info(f"Ran {len(relations)} relation(s) in {time.time() - start:.1f} seconds")
