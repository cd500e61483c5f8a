"""Core domain: models, normalization and ports. No I/O."""
