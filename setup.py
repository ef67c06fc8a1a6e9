from setuptools import setup, find_packages

setup(
    name="evm-calldata",
    version="0.1.0",
    description="Ethereum contract ABI encoder and deployment assembler",
    packages=find_packages(),
    install_requires=[
        "web3>=6.0.0",
        "eth-account>=0.8.0",
        "eth-utils>=2.0.0",
        "jsonschema>=4.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "eth-abi>=4.0.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "evm-calldata=evm_calldata.main:main",
        ],
    },
)
