BYTES = "byte string"
INTEGER = "integer"
LIST = "list"
DICT = "dict"


class Bytes:
    __slots__ = ("value",)

    kind = BYTES

    def __init__(self, value: bytes):
        self.value = value

    def __repr__(self):
        return f"Bytes({self.value!r})"


class Integer:
    __slots__ = ("value",)

    kind = INTEGER

    def __init__(self, value: int):
        self.value = value

    def __repr__(self):
        return f"Integer({self.value})"
