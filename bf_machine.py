"""
Tape machine: the data tape, the data pointer and one method per instruction.

The machine knows nothing about loops. `[` and `]` decode to ops like every
other instruction, but only the interpreter acts on them.
"""

from enum import Enum

from bf_errors import OutputFailure, UnexpectedEndOfInput

TAPE_SIZE = 30000
CELL_MODULUS = 256


class Op(Enum):
    PLUS = '+'
    MINUS = '-'
    PREVIOUS = '<'
    NEXT = '>'
    INPUT = ','
    OUTPUT = '.'
    LOOP_START = '['
    LOOP_END = ']'


_OPS = {op.value: op for op in Op}


def decode(char):
    """Return the Op for a source character, or None for commentary."""
    return _OPS.get(char)


def stream_input(stream):
    """Input handler reading one byte at a time from a binary stream."""
    def handler():
        data = stream.read(1)
        if not data:
            return None
        return data[0]
    return handler


def stream_output(stream):
    """Output handler writing one byte at a time to a binary stream."""
    def handler(byte):
        stream.write(bytes((byte,)))
        stream.flush()
    return handler


class TapeMachine:
    def __init__(self, input_handler, output_handler, tape_size=TAPE_SIZE):
        if tape_size < 1:
            raise ValueError(f'tape size must be positive, got {tape_size}')
        self.tape = [0] * tape_size
        self.ptr = 0
        self.input_handler = input_handler
        self.output_handler = output_handler
        self.step_count = 0
        self._dispatch = {
            Op.PLUS: self.increment,
            Op.MINUS: self.decrement,
            Op.PREVIOUS: self.move_left,
            Op.NEXT: self.move_right,
            Op.INPUT: self.read_byte,
            Op.OUTPUT: self.write_byte,
        }

    @property
    def current(self):
        return self.tape[self.ptr]

    def increment(self):
        self.tape[self.ptr] = (self.tape[self.ptr] + 1) % CELL_MODULUS

    def decrement(self):
        self.tape[self.ptr] = (self.tape[self.ptr] - 1) % CELL_MODULUS

    def move_left(self):
        self.ptr = (self.ptr - 1) % len(self.tape)

    def move_right(self):
        self.ptr = (self.ptr + 1) % len(self.tape)

    def read_byte(self):
        byte = self.input_handler()
        if byte is None:
            raise UnexpectedEndOfInput()
        self.tape[self.ptr] = byte % CELL_MODULUS

    def write_byte(self):
        try:
            self.output_handler(self.tape[self.ptr])
        except (OSError, ValueError) as e:
            raise OutputFailure(f'Output failed: {e}') from e

    def execute(self, op):
        """Run a single non-loop instruction."""
        try:
            method = self._dispatch[op]
        except KeyError:
            raise ValueError(f'{op} is not a tape instruction') from None
        self.step_count += 1
        method()
