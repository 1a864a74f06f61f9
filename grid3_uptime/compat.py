"""
Helpers to decode values returned by GraphQL into regular integers.

GraphQL has no 64 bit integer type, so the grid's GraphQL returns BigInt
fields like timestamps and uptimes as strings. Depending on the endpoint and
its version, the same fields can also show up as plain JSON numbers. We accept
both and make sure the result fits the 64 bit types used on chain.
"""

import re

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1

INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_int(value):
    # bool is a subclass of int, but a boolean is never a valid BigInt
    if isinstance(value, bool):
        raise ValueError("wrong type")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if not INTEGER.fullmatch(value):
            raise ValueError("Invalid number: {!r}".format(value))
        return int(value)
    raise ValueError("wrong type")


def de_i64(value):
    """Decode a signed 64 bit integer given either as a number or a string."""
    number = parse_int(value)
    if not I64_MIN <= number <= I64_MAX:
        raise ValueError("Invalid number")
    return number


def de_u64(value):
    """Decode an unsigned 64 bit integer given either as a number or a string."""
    number = parse_int(value)
    if not 0 <= number <= U64_MAX:
        raise ValueError("Invalid number")
    return number
