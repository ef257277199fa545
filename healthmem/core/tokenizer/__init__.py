"""
Tokenizer module for prompt size counting.

Provides accurate token counting using tiktoken with fast approximation fallback.
The model router compares these counts against its local/cloud threshold.
"""

from healthmem.config import TokenizerConfig
from healthmem.core.tokenizer.tokenizer import Tokenizer

__all__ = ["Tokenizer", "TokenizerConfig"]
