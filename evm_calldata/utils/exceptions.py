"""
Exception hierarchy for the EVM calldata encoder

Every error raised by this package derives from CalldataError, which carries a
numeric code, a details dictionary and an optional underlying cause so that
callers (UIs, RPC layers) can render or serialize failures uniformly.
"""

from typing import Any, Dict, Optional


class ErrorCodes:
    """Numeric error codes grouped by area"""
    # Type parsing (1xxx)
    TYPE_PARSE_ERROR = 1001
    TYPE_TOO_DEEP = 1002
    ABI_PARSE_ERROR = 1003

    # Encoding (2xxx)
    ENCODING_FAILED = 2001
    ARGUMENT_COUNT_MISMATCH = 2002

    # Deployment (3xxx)
    CONSTRUCTOR_NOT_FOUND = 3001
    MISSING_BYTECODE = 3002
    COMPILATION_FAILED = 3003
    TRANSACTION_FAILED = 3004
    DEPLOYMENT_FAILED = 3005
    MISSING_CONTRACT_ADDRESS = 3006

    # Configuration (4xxx)
    CONFIG_NOT_FOUND = 4001
    CONFIG_VALIDATION_FAILED = 4002


class CalldataError(Exception):
    """Base exception class for the calldata encoder"""

    default_code: Optional[int] = None

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logging or API responses"""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result


class TypeParseError(CalldataError):
    """An ABI type string does not match the supported grammar"""
    default_code = ErrorCodes.TYPE_PARSE_ERROR

    def __init__(self, message: str, type_str: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if type_str is not None:
            self.details["type"] = type_str


class AbiParseError(CalldataError):
    """An ABI document is not a JSON array or object of ABI items"""
    default_code = ErrorCodes.ABI_PARSE_ERROR


class EncodingFailed(CalldataError):
    """A value's shape or range is incompatible with its declared type"""
    default_code = ErrorCodes.ENCODING_FAILED

    def __init__(self, reason: str, abi_type: Optional[str] = None, **kwargs):
        super().__init__(reason, **kwargs)
        self.reason = reason
        if abi_type is not None:
            self.details["type"] = abi_type


class ArgumentCountMismatch(CalldataError):
    """Number of values disagrees with the number of slots in a frame"""
    default_code = ErrorCodes.ARGUMENT_COUNT_MISMATCH

    def __init__(self, expected: int, got: int, message: Optional[str] = None, **kwargs):
        self.expected = expected
        self.got = got
        super().__init__(
            message or f"Argument count mismatch: expected {expected}, got {got}",
            **kwargs
        )
        self.details.update({"expected": expected, "got": got})


class ConstructorNotFound(CalldataError):
    """Constructor arguments were supplied but the ABI has no constructor"""
    default_code = ErrorCodes.CONSTRUCTOR_NOT_FOUND


class MissingBytecode(CalldataError):
    """No usable bytecode and no compilable source"""
    default_code = ErrorCodes.MISSING_BYTECODE


class CompilationFailed(CalldataError):
    """The compiler collaborator reported a failure"""
    default_code = ErrorCodes.COMPILATION_FAILED

    def __init__(self, reason: str, contract_name: Optional[str] = None, **kwargs):
        super().__init__(reason, **kwargs)
        self.reason = reason
        if contract_name:
            self.details["contract_name"] = contract_name


class TransactionFailed(CalldataError):
    """Signing or broadcasting the deployment transaction failed"""
    default_code = ErrorCodes.TRANSACTION_FAILED

    def __init__(self, message: str, tx_hash: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if tx_hash:
            self.details["tx_hash"] = tx_hash


class DeploymentFailed(CalldataError):
    """The deployment transaction was mined but reverted"""
    default_code = ErrorCodes.DEPLOYMENT_FAILED

    def __init__(self, message: str, tx_hash: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if tx_hash:
            self.details["tx_hash"] = tx_hash


class MissingContractAddress(CalldataError):
    """The deployment receipt lacked a contract address"""
    default_code = ErrorCodes.MISSING_CONTRACT_ADDRESS

    def __init__(self, message: str, tx_hash: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if tx_hash:
            self.details["tx_hash"] = tx_hash


class ConfigurationError(CalldataError):
    """Configuration file missing or invalid"""
    default_code = ErrorCodes.CONFIG_VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if config_file:
            self.details["config_file"] = config_file
        if field:
            self.details["field"] = field
