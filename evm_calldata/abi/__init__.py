from .encoder import (
    encode_abi,
    encode_dynamic_payload,
    encode_frame,
    encode_parameters,
    encode_scalar,
    encode_value,
    is_dynamic,
    static_size,
)
from .function import AbiFunction
from .parser import AbiItem, AbiItemType, AbiParser, StateMutability
from .types import (
    AbiType,
    AddressType,
    BoolType,
    BytesType,
    DynamicArrayType,
    FixedArrayType,
    FixedBytesType,
    IntType,
    Parameter,
    StringType,
    TupleType,
    UIntType,
    parse_parameters,
    parse_type,
)
from .values import (
    BoolValue,
    BytesValue,
    CompositeValue,
    EncodableValue,
    IntegerValue,
    TextValue,
    to_encodable,
)
