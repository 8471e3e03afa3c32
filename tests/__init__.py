"""Test suite for packsmith.

Test Structure:
- unit/: Unit tests per module (config, templating, minify, events, build, cli)
- integration/: Whole projects loaded from disk and built end to end
- conftest.py: Shared fixtures (project factory, recording minifier, event recorder)
"""
