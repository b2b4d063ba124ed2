"""
Front end: lark grammar, parser and parse-tree transformer for .rec sources.
"""

from .parser import Parser
from .transformer import RecmatchTransformer
