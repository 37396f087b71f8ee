"""
ytldr summarization core.

Content-type detection, text extraction, chunking and hierarchical
summarization over external completion providers.
"""

__version__ = "0.3.0"
