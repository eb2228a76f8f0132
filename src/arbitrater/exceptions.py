from typing import Any


class ArbitraterException(Exception):
    pass


class UnknownParameterError(ArbitraterException, ValueError):
    def __init__(self, parameter: str, target: Any):
        super().__init__(
            f"Parameter named {parameter} not found in primary constructor of "
            f"{type_name(target)}"
        )
        self.parameter = parameter
        self.target = target


class UnsupportedTypeError(ArbitraterException, TypeError):
    pass


class EmptyCandidateSetError(ArbitraterException):
    def __init__(self, target: Any):
        super().__init__(f"No concrete implementations found for [{type_name(target)}]")
        self.target = target


class RecursionDepthError(ArbitraterException):
    def __init__(self, target: Any, max_depth: int):
        super().__init__(
            f"Exceeded maximum nesting depth {max_depth} while building "
            f"[{type_name(target)}]; is the type self-referential?"
        )
        self.target = target
        self.max_depth = max_depth


class InstanceCreationError(ArbitraterException):
    def __init__(self, target: Any):
        super().__init__(
            f"Could not generate random value for class [{type_name(target)}]"
        )
        self.target = target


def type_name(tp: Any) -> str:
    """Fully qualified name of a class, or the repr of any other annotation."""
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
