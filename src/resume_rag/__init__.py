"""Document-grounded question answering: chunk, embed, index, retrieve, answer."""

__version__ = "0.1.0"
