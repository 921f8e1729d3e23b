"""Command line interface (``python -m rfq_recap.cli``)."""
