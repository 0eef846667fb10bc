"""
Property-based tests for the CHIP-8 core.

This package hosts Hypothesis strategies, a reference ALU model, and the
test entrypoints for both the fast CI lane and the nightly fuzz job.
"""
