"""Command-line tools (run with python -m backend_neuprint.tools.<name>)."""
