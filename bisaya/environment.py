from dataclasses import dataclass
from typing import Any, Dict, Optional

from bisaya.errors import Position, RuntimeTypeError, UndefinedVariableError
from bisaya.types import DataType, coerce_value, default_value


@dataclass
class Cell:
    data_type: DataType
    value: Any


class Environment:
    """Flat runtime store mapping identifiers to typed value cells.

    There is no parent chain: blocks share the single program-wide store.
    """
    def __init__(self):
        self.cells: Dict[str, Cell] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.cells

    def get(self, name: str, position: Optional[Position] = None) -> Any:
        return self.cell(name, position).value

    def cell(self, name: str, position: Optional[Position] = None) -> Cell:
        if name not in self.cells:
            raise UndefinedVariableError(name, position)
        return self.cells[name]

    def set(self, name: str, value: Any, position: Optional[Position] = None) -> Any:
        cell = self.cell(name, position)
        try:
            cell.value = coerce_value(value, cell.data_type)
        except TypeError as e:
            raise RuntimeTypeError(f'cannot assign to {name}: {e}', position)
        return cell.value

    # Uniqueness is enforced by the parser; re-running a declaration rebinds it.
    def declare(self, name: str, data_type: DataType, value: Any = None,
                position: Optional[Position] = None):
        if value is None:
            value = default_value(data_type)
        else:
            try:
                value = coerce_value(value, data_type)
            except TypeError as e:
                raise RuntimeTypeError(f'cannot initialize {name}: {e}', position)
        self.cells[name] = Cell(data_type, value)
