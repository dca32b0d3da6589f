"""Wire configuration into the store, the repositories and the classifier.

Everything is constructed from an explicit DimemsConfig; nothing reads global
state after construction.
"""

from __future__ import annotations

import logging

from dimems.config import DimemsConfig
from dimems.memory.classifier import MemoryClassifier
from dimems.memory.episodic import EpisodicMemory
from dimems.memory.longterm import LongtermMemory
from dimems.memory.short_term import ShortTermMemory
from dimems.storage.filesystem import DocumentStore
from dimems.storage.layout import VaultLayout

logger = logging.getLogger(__name__)


class MemorySystem:
    """The three memory kinds plus the classifier over one vault."""

    def __init__(self, config: DimemsConfig, index: bool = False) -> None:
        self.config = config
        self.layout = VaultLayout(config.vault)
        self.layout.ensure_structure()
        self.store = DocumentStore(self.layout.root, config.vault.extension)
        self.short_term = ShortTermMemory(self.store, self.layout)
        self.episodic = EpisodicMemory(self.store, self.layout, index=index)
        self.longterm = LongtermMemory(self.store, self.layout, index=index)
        self.classifier = MemoryClassifier()
        logger.info("Vault ready at %s", self.layout.root)
