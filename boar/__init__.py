from boar.boar_parser import parse
from boar.boar_runtime import ScriptRunner, ExecutionResult

__all__ = ["parse", "ScriptRunner", "ExecutionResult"]
