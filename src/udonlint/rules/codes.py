"""Stable diagnostic codes.

Codes are never reused once published. Gaps are deliberate:
- 4, 10: reserved
- 23, 24: retired (superseded by SERIALIZABLE_CLASS_USAGE)
"""

from enum import IntEnum


class LintCode(IntEnum):
    # File-level failure while processing a file
    FILE_FAILURE = 0

    # Basic language feature restrictions
    TRY_CATCH = 1
    THROW = 2
    LOCAL_FUNCTION = 3
    CONSTRUCTOR = 5
    GENERIC_METHOD = 6
    OBJECT_INITIALIZER = 7
    COLLECTION_INITIALIZER = 8
    MULTIDIMENSIONAL_ARRAY = 9
    STATIC_FIELD = 11
    NESTED_TYPE = 12
    GENERIC_CLASS = 18
    GOTO_STATEMENT = 26
    NULL_CONDITIONAL = 27
    NULL_COALESCING = 28
    ASYNC_AWAIT = 29

    # API and attribute restrictions
    NETWORK_CALLABLE = 13
    TEXTMESHPRO_API = 14
    PROPERTY = 15
    METHOD_OVERLOAD = 16
    INTERFACE = 17
    UNEXPOSED_API = 19
    SEND_CUSTOM_EVENT_TARGET = 30

    # Cross-file and semantic analysis
    CROSS_FILE_FIELD_ACCESS = 20
    STATIC_METHOD_FIELD_ACCESS = 21
    CROSS_FILE_METHOD_INVOCATION = 22
    SERIALIZABLE_CLASS_USAGE = 25


RESERVED_CODES: frozenset[int] = frozenset({4, 10})
RETIRED_CODES: frozenset[int] = frozenset({23, 24})
