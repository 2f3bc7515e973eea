from __future__ import annotations
import logging

from typing import Optional

from lark import Lark
from lark.exceptions import UnexpectedInput  # root of all lark exceptions

from .symbols import Program, ToAst
from .grammar import GRAMMAR


logger = logging.getLogger(__name__)


class CommandFrontEnd:
    """
    Parser for the tree command language.

    The lark parser is built once, and reused for every `parse`. The result
    of the last parse is held on the instance, i.e. callers check
    `is_success` and then read `get_parsed` or `error_summary`.
    """
    def __init__(self, raise_exception: bool = False):
        self.parser = Lark(GRAMMAR, parser="earley", start="program")
        self.transformer = ToAst()
        self.raise_exception = raise_exception
        self.text: Optional[str] = None
        self.parsed: Optional[Program] = None
        self.exc: Optional[UnexpectedInput] = None

    def is_success(self) -> bool:
        return self.parsed is not None

    def get_parsed(self) -> Optional[Program]:
        return self.parsed

    def error_summary(self) -> Optional[str]:
        """
        lark's message for the last failed parse, followed by the offending
        line with a caret under the failing column
        """
        if self.exc is None:
            return None
        context = self.exc.get_context(self.text).rstrip()
        return f"{self.exc}\n{context}" if context else str(self.exc)

    def parse(self, text: str):
        """
        parse `text` into a Program

        :param text: one or more commands, separated by ';'
        """
        self.text = text
        self.parsed = None
        self.exc = None
        try:
            tree = self.parser.parse(text)
        except UnexpectedInput as e:
            logger.debug(f"failed to parse [{text}] at line {e.line}, column {e.column}")
            self.exc = e
            if self.raise_exception:
                raise
            return

        logger.debug(f"untransformed AST:\n{tree.pretty()}")
        self.parsed = self.transformer.transform(tree)
