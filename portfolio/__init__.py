"""
Package marker for the company portfolio API under `portfolio`.
It groups the HTTP layer, the resource query core, and shared helpers under one import path.
Most functionality lives in the sibling packages; this file intentionally stays lightweight.
"""
