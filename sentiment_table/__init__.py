"""
Core package for the sentiment-enriched table widget.

Submodules provide the data-binding model, the sentiment enrichment client and
coordinator, and the table rendering helpers that are orchestrated by the
top-level `app.py`.
"""
