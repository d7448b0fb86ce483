"""
Test Suite for the Index Comparison Workbench

Includes:
- Unit tests for alignment, normalization and metric calculations (beside each package)
- Integration tests for the comparison pipeline with a mocked provider
- CLI tests
"""
