# briefeval/__init__.py
"""
Experiment brief evaluation.

Scores the sections of an experiment brief against per-section rubrics using
presence checks, keyword heuristics and an LLM judge, then aggregates a
weighted total.
"""

__version__ = "1.0.0"
