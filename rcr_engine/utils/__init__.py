from .graph_ops import KnowledgeGraph, TableEquivalencer
from .logging_utils import setup_logging

__all__ = [
    'KnowledgeGraph',
    'TableEquivalencer',
    'setup_logging',
]
