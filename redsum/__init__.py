"""Redmine activity summarizer.

Collects recent tracker activity, summarises it with a generative-text
backend and publishes the result back into the tracker.
"""

__all__: list[str] = []
