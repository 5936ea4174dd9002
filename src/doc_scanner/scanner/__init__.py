"""
Document Scanner Package

Provides paragraph classification, tree walking, comment annotation and
scan sessions for rich documents.
"""

from .classifier import Classification, ClassificationKind, ClassificationRule, ParagraphClassifier
from .walker import TreeWalker, WalkState
from .comments import CommentAnnotator
from .document_scanner import DocumentScanner, ScanResult
from .session import ScanSession

__all__ = [
    'Classification',
    'ClassificationKind',
    'ClassificationRule',
    'ParagraphClassifier',
    'TreeWalker',
    'WalkState',
    'CommentAnnotator',
    'DocumentScanner',
    'ScanResult',
    'ScanSession',
]
