from typing import Dict, Optional

from plasticine.errors import GeneralRuntimeError
from plasticine.types import Value


class ExecutionContext:
    """Variable store and run flag for one program run.

    There is a single global scope; names are case-sensitive.
    """
    def __init__(self, variables: Optional[Dict[str, Value]] = None):
        self.variables: Dict[str, Value] = dict(variables) if variables else {}
        self.running = True

    def get(self, name: str) -> Value:
        if name in self.variables:
            return self.variables[name]
        raise GeneralRuntimeError(f"undefined variable '{name}'")

    def set(self, name: str, value: Value):
        self.variables[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.variables
