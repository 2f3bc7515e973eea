"""
Contains classes used for data exchange between the frontend and its
callers, i.e. do not have any "compute" methods.
"""
from typing import Any, List, Optional, TypeVar, Generic
from dataclasses import dataclass, field
from enum import Enum, auto

from .steps import Step

# This is used to parameterize Response type as per: https://stackoverflow.com/a/42989302
T = TypeVar("T")


# section result enums


class MetaCommandResult(Enum):
    Success = auto()
    UnrecognizedCommand = auto()
    InvalidArgument = auto()
    ValidationFailed = auto()


class CommandType(Enum):
    Insert = auto()
    Delete = auto()
    Find = auto()


@dataclass
class Response(Generic[T]):
    """
    Use as a generic class to encapsulate a response and a body
    """

    # is success
    success: bool
    # if fail, why
    error_message: str = None
    # an enum encoding state
    status: Any = None
    # output of operation
    body: T = None

    def __str__(self):
        if self.error_message:
            return f"Response(fail, {self.error_message})"
        else:
            return f"Response(success, {str(self.body)})"

    def __repr__(self):
        return self.__str__()


@dataclass
class CommandOutcome:
    """
    Result of running one command against the tree
    """

    command_type: CommandType
    key: Any
    success: bool
    # TreeInsertResult or TreeDeleteResult; None for find
    status: Any
    message: str
    # value found, for find
    value: Any = None
    # root-to-leaf node ids, for a successful find
    path: Optional[List[int]] = None
    # only populated when tracing is on
    steps: List[Step] = field(default_factory=list)
