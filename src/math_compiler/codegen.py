"""
x86-64 Code Generator
=====================

This module lowers a postfix token stream into NASM assembly for a
stack-machine evaluator. The generated program keeps its operands on an
explicit value stack in the main routine's frame, evaluates the tokens
in order, and prints the single remaining value with ``printf``.

Code Generation Strategy
------------------------
Every token becomes one block of instructions:

1. Numbers and constants are loaded into XMM0 and pushed.
2. Operators, functions and stack operations first check at run time
   that enough operands are on the stack, then pop their operands
   (right operand first), compute, and push the result.

Register Usage
--------------
| Register  | Usage                                          |
|-----------|------------------------------------------------|
| R12       | Value-stack depth (callee-saved, survives libc)|
| RBP       | Frame base; value-stack slots sit below it     |
| XMM0      | Value popped/pushed, libc argument and result  |
| XMM1-XMM4 | Scratch operands                               |
| RAX, RCX, RDX | Integer scratch (exponent, factorial)      |
| R11       | Scratch for loading float64 immediates          |

Value Stack Layout
------------------
``main`` reserves STACK_SLOTS float64 slots below RBP. Slot ``i`` lives
at ``[rbp + 8*i - STACK_BYTES]``; ``push_stack`` stores XMM0 at slot R12
and increments R12, ``pop_stack`` decrements R12 and loads the slot.
The depth is not bounds-checked against STACK_SLOTS.

Runtime Errors
--------------
| Condition            | Handling                            | Exit |
|----------------------|-------------------------------------|------|
| Stack underflow      | jump to ``stack_underflow``         | 2    |
| Division/mod by zero | jump to ``division_by_zero``        | 1    |
| x ^ y with x <= 0 and non-integral or negative y | result 0.0 | - |
| n! for non-integer or negative n | result 0.0              | -    |

Usage
-----
>>> from math_compiler.lexer import tokenize
>>> from math_compiler.codegen import CodeGenerator
>>> asm = CodeGenerator().generate(tokenize("3 4 +"))
"""

import logging
import math
from typing import Callable, Sequence

from math_compiler.lexer import Token, TokenKind
from math_compiler.symbols import DEFAULT_SYMBOLS, Op, SymbolTable

logger = logging.getLogger(__name__)

# Value stack geometry
STACK_SLOTS = 32
SLOT_SIZE = 8
STACK_BYTES = STACK_SLOTS * SLOT_SIZE

# Exact 64-bit factorials stop at 20! (21! > 2^63 - 1)
MAX_INTEGER_FACTORIAL = 20

# Generated-program exit statuses
EXIT_DIVISION_BY_ZERO = 1
EXIT_STACK_UNDERFLOW = 2

# libc routines the generated program may call
LIBM_FUNCTIONS = ("floor", "log", "exp", "sin", "cos", "tan")


def float_literal(value: float) -> str:
    """
    Format a float as a NASM floating-point constant.

    NASM needs a period in the mantissa to tell floats from integers,
    and spells infinity as ``__Infinity__``.
    """
    if math.isinf(value):
        return "-__Infinity__" if value < 0 else "__Infinity__"
    text = repr(value)
    if "e" in text and "." not in text:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}.0e{exponent}"
    return text


def slot_address(index_register: str) -> str:
    """Effective address of the value-stack slot indexed by a register."""
    return f"[rbp + {SLOT_SIZE}*{index_register} - {STACK_BYTES}]"


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates x86-64 NASM assembly from postfix tokens.

    The generator walks the tokens once, emitting one block per token,
    and wraps them in a fixed header (data section, entry routine) and
    footer (helpers, error handlers, read-only data).

    Labels for control flow inside ``^``, ``!``, ``/`` and ``%`` blocks get
    a numeric suffix from a counter that is reset at the start of every
    ``generate()`` call, so each program has unique labels and separate
    calls do not influence each other.

    Attributes:
        symbols: Vocabulary used for arities and constant values
        output_comments: Emit explanatory comments in the assembly
    """

    def __init__(self, symbols: SymbolTable = DEFAULT_SYMBOLS, output_comments: bool = True):
        self.symbols = symbols
        self.output_comments = output_comments

        # Assembly output lines
        self._output: list[str] = []

        # Label generation
        self._label_counter: int = 0

    def generate(self, tokens: Sequence[Token]) -> str:
        """
        Generate a complete assembly program.

        Args:
            tokens: Classified postfix tokens

        Returns:
            NASM source text
        """
        self._output = []
        self._label_counter = 0

        self._emit_header(tokens)

        for token in tokens:
            self._generate_token(token)

        self._emit_result()
        self._emit_helpers()
        self._emit_error_handlers()
        self._emit_rodata()

        logger.debug(
            f"Generated {len(self._output)} lines for {len(tokens)} tokens "
            f"({self._label_counter} labelled blocks)"
        )
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line of assembly."""
        self._output.append(line)

    def _emit_comment(self, comment: str) -> None:
        """Emit a full-line comment."""
        if self.output_comments:
            self._emit(f"    ; {comment}")

    def _emit_label(self, label: str) -> None:
        """Emit a label definition."""
        self._emit(f"{label}:")

    def _emit_instruction(self, mnemonic: str, operand: str = "", comment: str = "") -> None:
        """Emit an instruction with optional operand and trailing comment."""
        line = f"    {mnemonic:<10}{operand}" if operand else f"    {mnemonic}"
        if comment and self.output_comments:
            line = f"{line:<40}; {comment}"
        self._emit(line.rstrip())

    def _emit_load_float(self, register: str, value: float) -> None:
        """Load a float64 immediate into an XMM register via R11."""
        self._emit_instruction("mov", f"r11, __float64__({float_literal(value)})")
        self._emit_instruction("movq", f"{register}, r11")

    def _new_label(self) -> int:
        """Allocate a fresh label suffix."""
        self._label_counter += 1
        return self._label_counter

    # =========================================================================
    # Header and Footer Generation
    # =========================================================================

    def _emit_header(self, tokens: Sequence[Token]) -> None:
        """Emit the data section and the entry routine prologue."""
        self._emit("; =============================================================================")
        self._emit("; Math compiler output")
        self._emit("; Generated NASM assembly for x86-64 (System V, links against libc)")
        self._emit("; =============================================================================")
        self._emit("")
        self._emit("section .data")
        self._emit('    format db "%lf", 10, 0')
        self._emit('    div_zero_msg db "Error: Division by zero", 10, 0')
        self._emit('    stack_underflow_msg db "Error: Stack underflow", 10, 0')

        # One slot per distinct constant, in first-use order
        seen: set[str] = set()
        for token in tokens:
            if token.kind is TokenKind.CONSTANT and token.text not in seen:
                seen.add(token.text)
                value = self.symbols.constants[token.text]
                self._emit(f"    const_{token.text} dq {value:.17g}")

        self._emit("")
        self._emit("section .text")
        self._emit("    global main")
        self._emit("    extern printf")
        self._emit("    extern exit")
        self._emit("")
        self._emit_label("main")
        self._emit_instruction("push", "rbp")
        self._emit_instruction("mov", "rbp, rsp")
        self._emit_instruction("sub", f"rsp, {STACK_BYTES}",
                               f"{STACK_SLOTS} float64 value-stack slots")
        self._emit_instruction("xor", "r12, r12", "r12 = value-stack depth")
        self._emit("")

    def _emit_result(self) -> None:
        """Pop the final value, print it and exit with status 0."""
        self._emit_comment("Print the final result")
        self._emit_underflow_check(1)
        self._emit_instruction("call", "pop_stack")
        self._emit_instruction("lea", "rdi, [rel format]")
        self._emit_instruction("mov", "rax, 1", "one vector argument")
        self._emit_instruction("call", "printf")
        self._emit_instruction("xor", "rdi, rdi")
        self._emit_instruction("call", "exit")
        self._emit("")

    def _emit_helpers(self) -> None:
        """Emit the push_stack and pop_stack subroutines."""
        self._emit_label("push_stack")
        self._emit_comment("Store xmm0 in slot r12, then grow the stack")
        self._emit_instruction("mov", "rax, r12")
        self._emit_instruction("movsd", f"{slot_address('rax')}, xmm0")
        self._emit_instruction("inc", "r12")
        self._emit_instruction("ret")
        self._emit("")
        self._emit_label("pop_stack")
        self._emit_comment("Shrink the stack, then load slot r12 into xmm0")
        self._emit_instruction("dec", "r12")
        self._emit_instruction("mov", "rax, r12")
        self._emit_instruction("movsd", f"xmm0, {slot_address('rax')}")
        self._emit_instruction("ret")
        self._emit("")

    def _emit_error_handlers(self) -> None:
        """Emit the shared runtime error exits."""
        for label, message, status in (
            ("division_by_zero", "div_zero_msg", EXIT_DIVISION_BY_ZERO),
            ("stack_underflow", "stack_underflow_msg", EXIT_STACK_UNDERFLOW),
        ):
            self._emit_label(label)
            self._emit_instruction("lea", f"rdi, [rel {message}]")
            self._emit_instruction("xor", "rax, rax")
            self._emit_instruction("call", "printf")
            self._emit_instruction("mov", f"rdi, {status}", f"exit code {status}")
            self._emit_instruction("call", "exit")
            self._emit("")

    def _emit_rodata(self) -> None:
        """Emit read-only data and libm declarations."""
        self._emit("section .rodata")
        self._emit("    align 16")
        self._emit("    abs_mask dq 0x7FFFFFFFFFFFFFFF, 0x7FFFFFFFFFFFFFFF")
        self._emit("")
        for name in LIBM_FUNCTIONS:
            self._emit(f"    extern {name}")

    # =========================================================================
    # Token Dispatch
    # =========================================================================

    def _generate_token(self, token: Token) -> None:
        self._emit_comment(f"Token: {token.text}")

        if token.kind is TokenKind.NUMBER:
            self._emit_load_float("xmm0", token.value)
            self._emit_instruction("call", "push_stack")
        elif token.kind is TokenKind.CONSTANT:
            self._emit_instruction("movsd", f"xmm0, [rel const_{token.text}]")
            self._emit_instruction("call", "push_stack")
        else:
            self._emit_underflow_check(self.symbols.arity[token.op.value])
            _OP_HANDLERS[token.op](self)

        self._emit("")

    def _emit_underflow_check(self, arity: int) -> None:
        self._emit_instruction("cmp", f"r12, {arity}")
        self._emit_instruction("jl", "stack_underflow")

    def _emit_pop_operands(self) -> None:
        """Pop the right operand into xmm1 and the left operand into xmm0."""
        self._emit_instruction("call", "pop_stack", "right operand")
        self._emit_instruction("movsd", "xmm1, xmm0")
        self._emit_instruction("call", "pop_stack", "left operand")

    def _emit_zero_divisor_check(self) -> None:
        """Jump to division_by_zero if xmm0 holds zero; NaN falls through."""
        divisor_ok = f"divisor_ok_{self._new_label()}"
        self._emit_instruction("xorpd", "xmm1, xmm1")
        self._emit_instruction("ucomisd", "xmm0, xmm1")
        self._emit_instruction("jp", divisor_ok, "NaN divisor")
        self._emit_instruction("je", "division_by_zero")
        self._emit_label(divisor_ok)

    # =========================================================================
    # Arithmetic Operators
    # =========================================================================

    def _generate_add(self) -> None:
        self._emit_pop_operands()
        self._emit_instruction("addsd", "xmm0, xmm1")
        self._emit_instruction("call", "push_stack")

    def _generate_sub(self) -> None:
        self._emit_pop_operands()
        self._emit_instruction("subsd", "xmm0, xmm1")
        self._emit_instruction("call", "push_stack")

    def _generate_mul(self) -> None:
        self._emit_pop_operands()
        self._emit_instruction("mulsd", "xmm0, xmm1")
        self._emit_instruction("call", "push_stack")

    def _generate_div(self) -> None:
        self._emit_instruction("call", "pop_stack", "divisor")
        self._emit_zero_divisor_check()
        self._emit_instruction("movsd", "xmm1, xmm0")
        self._emit_instruction("call", "pop_stack", "dividend")
        self._emit_instruction("divsd", "xmm0, xmm1")
        self._emit_instruction("call", "push_stack")

    def _generate_mod(self) -> None:
        """Floored remainder: x - y * floor(x / y), sign follows y."""
        self._emit_instruction("call", "pop_stack", "divisor y")
        self._emit_zero_divisor_check()
        self._emit_instruction("movsd", "xmm1, xmm0")
        self._emit_instruction("call", "pop_stack", "dividend x")
        # x and y live in the frame across the libm call
        self._emit_instruction("sub", "rsp, 16")
        self._emit_instruction("movsd", "[rsp], xmm0")
        self._emit_instruction("movsd", "[rsp + 8], xmm1")
        self._emit_instruction("divsd", "xmm0, xmm1", "x / y")
        self._emit_instruction("call", "floor")
        self._emit_instruction("mulsd", "xmm0, [rsp + 8]", "y * floor(x / y)")
        self._emit_instruction("movsd", "xmm1, [rsp]")
        self._emit_instruction("subsd", "xmm1, xmm0", "x - y * floor(x / y)")
        self._emit_instruction("movsd", "xmm0, xmm1")
        self._emit_instruction("add", "rsp, 16")
        self._emit_instruction("call", "push_stack")

    def _generate_pow(self) -> None:
        """
        Generate x ^ y.

        Non-negative integral exponents use square-and-multiply. Any
        other exponent goes through exp(y * log(x)), which needs x > 0;
        otherwise the result is 0.0.
        """
        n = self._new_label()
        general = f"power_general_{n}"
        loop = f"power_loop_{n}"
        skip = f"power_skip_{n}"
        int_done = f"power_int_done_{n}"
        error = f"power_error_{n}"
        done = f"power_done_{n}"

        self._emit_instruction("call", "pop_stack", "exponent y")
        self._emit_instruction("movsd", "xmm1, xmm0")
        self._emit_instruction("call", "pop_stack", "base x")

        self._emit_comment("Integral exponent if truncation round-trips")
        self._emit_instruction("cvttsd2si", "rax, xmm1")
        self._emit_instruction("cvtsi2sd", "xmm2, rax")
        self._emit_instruction("ucomisd", "xmm1, xmm2")
        self._emit_instruction("jne", general)
        self._emit_instruction("jp", general, "NaN exponent")
        self._emit_instruction("test", "rax, rax")
        self._emit_instruction("js", general, "negative exponent")

        self._emit_comment("Exponentiation by squaring")
        self._emit_load_float("xmm2", 1.0)
        self._emit_instruction("test", "rax, rax")
        self._emit_instruction("jz", int_done, "x ^ 0 = 1")
        self._emit_label(loop)
        self._emit_instruction("test", "rax, 1")
        self._emit_instruction("jz", skip)
        self._emit_instruction("mulsd", "xmm2, xmm0", "result *= x")
        self._emit_label(skip)
        self._emit_instruction("mulsd", "xmm0, xmm0", "x *= x")
        self._emit_instruction("shr", "rax, 1")
        self._emit_instruction("jnz", loop)
        self._emit_label(int_done)
        self._emit_instruction("movsd", "xmm0, xmm2")
        self._emit_instruction("jmp", done)

        self._emit_label(general)
        self._emit_comment("x ^ y = exp(y * log(x)), defined for x > 0")
        self._emit_instruction("xorpd", "xmm2, xmm2")
        self._emit_instruction("ucomisd", "xmm0, xmm2")
        self._emit_instruction("jbe", error)
        self._emit_instruction("sub", "rsp, 16")
        self._emit_instruction("movsd", "[rsp], xmm1", "y survives the libm calls")
        self._emit_instruction("call", "log")
        self._emit_instruction("mulsd", "xmm0, [rsp]")
        self._emit_instruction("call", "exp")
        self._emit_instruction("add", "rsp, 16")
        self._emit_instruction("jmp", done)

        self._emit_label(error)
        self._emit_instruction("xorpd", "xmm0, xmm0", "0.0 for an undefined power")

        self._emit_label(done)
        self._emit_instruction("call", "push_stack")

    def _generate_factorial(self) -> None:
        """
        Generate n!.

        Integers up to MAX_INTEGER_FACTORIAL are multiplied in RCX. Larger
        n, or an overflow in the integer loop, restarts from the original
        n (kept in RDX) with a float64 accumulator. Non-integers and
        negative numbers yield 0.0.
        """
        n = self._new_label()
        loop = f"factorial_loop_{n}"
        int_done = f"factorial_done_{n}"
        overflow = f"factorial_overflow_{n}"
        fp_loop = f"factorial_fp_loop_{n}"
        error = f"factorial_error_{n}"
        end = f"factorial_end_{n}"

        self._emit_instruction("call", "pop_stack", "n")
        self._emit_instruction("cvttsd2si", "rax, xmm0")
        self._emit_instruction("cvtsi2sd", "xmm1, rax")
        self._emit_instruction("ucomisd", "xmm0, xmm1")
        self._emit_instruction("jne", error, "not an integer")
        self._emit_instruction("jp", error, "NaN")
        self._emit_instruction("test", "rax, rax")
        self._emit_instruction("js", error, "negative")
        self._emit_instruction("mov", "rdx, rax", "original n for the fallback")
        self._emit_instruction("cmp", f"rax, {MAX_INTEGER_FACTORIAL}")
        self._emit_instruction("jg", overflow)

        self._emit_instruction("mov", "rcx, 1")
        self._emit_instruction("test", "rax, rax")
        self._emit_instruction("jz", int_done, "0! = 1")
        self._emit_label(loop)
        self._emit_instruction("imul", "rcx, rax")
        self._emit_instruction("jo", overflow)
        self._emit_instruction("dec", "rax")
        self._emit_instruction("jnz", loop)
        self._emit_label(int_done)
        self._emit_instruction("cvtsi2sd", "xmm0, rcx")
        self._emit_instruction("jmp", end)

        self._emit_label(overflow)
        self._emit_comment("Float64 product n * (n-1) * ... * 1")
        self._emit_instruction("cvtsi2sd", "xmm0, rdx")
        self._emit_load_float("xmm2", 1.0)
        self._emit_instruction("movsd", "xmm3, xmm2", "step")
        self._emit_instruction("xorpd", "xmm4, xmm4")
        self._emit_label(fp_loop)
        self._emit_instruction("mulsd", "xmm2, xmm0")
        self._emit_instruction("subsd", "xmm0, xmm3")
        self._emit_instruction("ucomisd", "xmm0, xmm4")
        self._emit_instruction("ja", fp_loop)
        self._emit_instruction("movsd", "xmm0, xmm2")
        self._emit_instruction("jmp", end)

        self._emit_label(error)
        self._emit_instruction("xorpd", "xmm0, xmm0", "0.0 for an undefined factorial")

        self._emit_label(end)
        self._emit_instruction("call", "push_stack")

    # =========================================================================
    # Functions
    # =========================================================================

    def _generate_abs(self) -> None:
        self._emit_instruction("call", "pop_stack")
        self._emit_instruction("andpd", "xmm0, [rel abs_mask]", "clear the sign bit")
        self._emit_instruction("call", "push_stack")

    def _generate_sqrt(self) -> None:
        self._emit_instruction("call", "pop_stack")
        self._emit_instruction("sqrtsd", "xmm0, xmm0")
        self._emit_instruction("call", "push_stack")

    def _generate_libm_call(self, name: str) -> None:
        self._emit_instruction("call", "pop_stack")
        self._emit_instruction("call", name)
        self._emit_instruction("call", "push_stack")

    def _generate_sin(self) -> None:
        self._generate_libm_call("sin")

    def _generate_cos(self) -> None:
        self._generate_libm_call("cos")

    def _generate_tan(self) -> None:
        self._generate_libm_call("tan")

    # =========================================================================
    # Stack Operations
    # =========================================================================

    def _generate_swap(self) -> None:
        """Exchange the two topmost slots in place; depth is unchanged."""
        self._emit_instruction("mov", "rax, r12")
        self._emit_instruction("dec", "rax", "top slot")
        self._emit_instruction("lea", "rcx, [rax - 1]", "second slot")
        self._emit_instruction("movsd", f"xmm0, {slot_address('rax')}")
        self._emit_instruction("movsd", f"xmm1, {slot_address('rcx')}")
        self._emit_instruction("movsd", f"{slot_address('rax')}, xmm1")
        self._emit_instruction("movsd", f"{slot_address('rcx')}, xmm0")

    def _generate_dup(self) -> None:
        self._emit_instruction("call", "pop_stack")
        self._emit_instruction("call", "push_stack")
        self._emit_instruction("call", "push_stack")


# Every operation must have a generator; checked at import time
_OP_HANDLERS: dict[Op, Callable[[CodeGenerator], None]] = {
    Op.ADD: CodeGenerator._generate_add,
    Op.SUB: CodeGenerator._generate_sub,
    Op.MUL: CodeGenerator._generate_mul,
    Op.DIV: CodeGenerator._generate_div,
    Op.POW: CodeGenerator._generate_pow,
    Op.MOD: CodeGenerator._generate_mod,
    Op.FACTORIAL: CodeGenerator._generate_factorial,
    Op.ABS: CodeGenerator._generate_abs,
    Op.SIN: CodeGenerator._generate_sin,
    Op.COS: CodeGenerator._generate_cos,
    Op.TAN: CodeGenerator._generate_tan,
    Op.SQRT: CodeGenerator._generate_sqrt,
    Op.SWAP: CodeGenerator._generate_swap,
    Op.DUP: CodeGenerator._generate_dup,
}

_missing = set(Op) - set(_OP_HANDLERS)
if _missing:
    raise ImportError(f"no code generator for {sorted(op.value for op in _missing)}")


def generate(tokens: Sequence[Token], symbols: SymbolTable = DEFAULT_SYMBOLS,
             output_comments: bool = True) -> str:
    """Generate assembly for a token sequence with a fresh generator."""
    return CodeGenerator(symbols, output_comments).generate(tokens)
