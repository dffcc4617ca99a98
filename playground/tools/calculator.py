"""
Calculator tool.

Evaluates arithmetic by walking the parsed AST and only allowing a fixed
set of operators, functions and constants. Nothing is ever passed to eval.
"""
import ast
import math
import operator

from pydantic import BaseModel, Field

from playground.models.tool import ToolResult
from playground.tools.base import BaseClientTool
from playground.utils.custom_exceptions import ToolExecutionError

ALLOWED_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Pow: operator.pow,
    ast.Mod: operator.mod,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

ALLOWED_FUNCTIONS = {
    'abs': abs,
    'round': round,
    'min': min,
    'max': max,
    'sqrt': math.sqrt,
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'log': math.log,
    'log10': math.log10,
    'exp': math.exp,
    'floor': math.floor,
    'ceil': math.ceil,
}

ALLOWED_CONSTANTS = {
    'pi': math.pi,
    'e': math.e,
}

# Guards against things like 9**9**9 locking up the event loop
MAX_EXPONENT = 10000


def safe_eval(node):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    elif isinstance(node, ast.Name):
        if node.id not in ALLOWED_CONSTANTS:
            raise ValueError(f"Unknown name {node.id}")
        return ALLOWED_CONSTANTS[node.id]
    elif isinstance(node, ast.BinOp):
        op = type(node.op)
        if op not in ALLOWED_OPERATORS:
            raise ValueError(f"Operator {op.__name__} not allowed")
        left = safe_eval(node.left)
        right = safe_eval(node.right)
        if op is ast.Pow and abs(right) > MAX_EXPONENT:
            raise ValueError("Exponent too large")
        return ALLOWED_OPERATORS[op](left, right)
    elif isinstance(node, ast.UnaryOp):
        op = type(node.op)
        if op not in ALLOWED_OPERATORS:
            raise ValueError(f"Operator {op.__name__} not allowed")
        return ALLOWED_OPERATORS[op](safe_eval(node.operand))
    elif isinstance(node, ast.Call):
        func_name = node.func.id if isinstance(node.func, ast.Name) else None
        if func_name not in ALLOWED_FUNCTIONS or node.keywords:
            raise ValueError(f"Function {func_name} not allowed")
        args = [safe_eval(arg) for arg in node.args]
        return ALLOWED_FUNCTIONS[func_name](*args)
    else:
        raise ValueError(f"Expression type {type(node).__name__} not allowed")


def evaluate(expression: str):
    tree = ast.parse(expression.replace('^', '**'), mode='eval')
    return safe_eval(tree.body)


def format_number(value) -> str:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return str(value)


class CalculatorInput(BaseModel):
    """Input schema for calculator."""
    expression: str = Field(
        ...,
        description="The mathematical expression to evaluate, e.g. '2 * (3 + 4)' or 'sin(pi/4)'",
    )


class CalculatorTool(BaseClientTool):
    """Evaluate a mathematical expression."""

    name: str = "calculator"
    description: str = (
        "Evaluate a mathematical expression. Supports arithmetic, powers, "
        "trigonometry and logarithms. Use this when the user asks to calculate something."
    )
    InputSchema = CalculatorInput
    result_type = "calculator"
    requires_confirmation = False

    async def run(self, params: CalculatorInput) -> ToolResult:
        try:
            result = evaluate(params.expression)
        except (SyntaxError, ValueError, TypeError, ZeroDivisionError, OverflowError) as e:
            raise ToolExecutionError(f"Failed to evaluate expression: {e}")

        formatted = format_number(result)
        return ToolResult(
            type=self.result_type,
            data={"expression": params.expression, "result": formatted},
            text=f"{params.expression} = {formatted}",
        )
