"""duopool command-line interface."""
