"""Citation and reference conversion engine.

Turns bibliographic records into CSL-JSON-like citations, derives citation
keys and renders BibTeX entries, BibTeX key lists and styled plain-text
bibliographies.
"""

__version__ = "0.1.0"
