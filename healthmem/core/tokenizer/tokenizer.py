"""
Prompt sizing for routing decisions.

The router compares prompt size against the hybrid threshold, so counts
only need to be stable and roughly proportional to what the backends bill.
tiktoken fetches its encoding files on first use; on a device without
network access the counter drops to the character ratio instead of failing
the request.
"""

import tiktoken

from healthmem.config import TokenizerConfig
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class Tokenizer:
    """
    Prompt size counter.

    Usage:
        tokenizer = Tokenizer()
        size = tokenizer.count_many(["Blood pressure 130/85", "Headache since Monday"])
    """

    def __init__(self, config: TokenizerConfig | None = None):
        self.config = config or TokenizerConfig()
        self._encoding: tiktoken.Encoding | None = None
        self._approximate = self.config.provider == "approximate"

    @property
    def approximate(self) -> bool:
        """True when counts come from the character ratio."""
        return self._approximate

    def _load_encoding(self) -> tiktoken.Encoding | None:
        if self._encoding is None and not self._approximate:
            try:
                self._encoding = tiktoken.get_encoding(self.config.model)
            except Exception as e:
                logger.warning(
                    f"Encoding {self.config.model} unavailable, approximating prompt sizes",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
                self._approximate = True
        return self._encoding

    def count_tokens(self, text: str) -> int:
        """
        Size of one prompt in tokens.

        Args:
            text: Prompt text

        Returns:
            Token count (character estimate when approximating)
        """
        if not text:
            return 0
        encoding = self._load_encoding()
        if encoding is None:
            return self.estimate_tokens(text)
        return len(encoding.encode(text))

    def estimate_tokens(self, text: str) -> int:
        return int(len(text) / self.config.chars_per_token) if text else 0

    def count_many(self, texts: list[str]) -> int:
        """Combined size of several record contents."""
        return sum(self.count_tokens(text) for text in texts)
