"""Core domain: levels, metadata models, merge and conversion, ports."""
