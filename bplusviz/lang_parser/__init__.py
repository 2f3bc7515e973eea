from .cmdhandler import CommandFrontEnd
from .symbols import Program, InsertCommand, DeleteCommand, FindCommand
