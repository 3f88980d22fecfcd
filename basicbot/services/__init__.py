"""Collaborator package exports."""

from .base import Answer, Intent, IntentRecognizer, KnowledgeBase, Product, ProductCatalog, RecognizerResult
from .catalog import HttpProductCatalog, JsonProductCatalog
from .faq import FaqKnowledgeBase
from .keywords import KeywordRecognizer
from .luis import LuisRecognizer
from .qna import QnAMakerKnowledgeBase

__all__ = [
    "Answer",
    "Intent",
    "IntentRecognizer",
    "KnowledgeBase",
    "Product",
    "ProductCatalog",
    "RecognizerResult",
    "HttpProductCatalog",
    "JsonProductCatalog",
    "FaqKnowledgeBase",
    "KeywordRecognizer",
    "LuisRecognizer",
    "QnAMakerKnowledgeBase",
]
