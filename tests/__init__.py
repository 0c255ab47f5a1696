"""Test suite for blendfold.

Test Structure:
- unit/: Unit tests per core package (motion, graph, classify, speed,
  assembly, config, io, utils) and the CLI
- conftest.py: Shared motion and graph fixtures
"""
