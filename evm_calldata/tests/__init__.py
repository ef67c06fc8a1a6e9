"""
evm_calldata test package

Run with:
    pytest evm_calldata/tests/ -v

Fixtures shared by the unit tests live in conftest.py.
"""
