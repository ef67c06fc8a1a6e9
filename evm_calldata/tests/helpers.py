"""Constants and small helpers shared by the unit tests"""

DEPLOYER_ADDRESS = "0x" + "11" * 20
CONTRACT_ADDRESS = "0x" + "22" * 20
TX_HASH = "0x" + "ab" * 32

# PUSH1 0x80 PUSH1 0x40 MSTORE, enough to look like creation code
SAMPLE_BYTECODE = "0x6080604052"


def word(value: int) -> str:
    """One 32-byte word as 64 hex digits"""
    return format(value, "064x")
