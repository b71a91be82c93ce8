"""
Feed interpreter: runs brainfuck one character at a time.

Outside a loop every instruction runs as soon as it is fed. A `[` starts
buffering instead; characters are recorded until the matching `]` arrives,
then the whole loop is replayed against the tape and the buffer is dropped.
This is what lets a loop be typed over several console lines.
"""

from bf_errors import (
    LoopBufferFull,
    LoopDepthExceeded,
    UnmatchedLoopEnd,
    UnmatchedLoopStart,
)
from bf_machine import TAPE_SIZE, Op, TapeMachine, decode

LOOP_BUFFER_SIZE = 30000
MAX_LOOP_DEPTH = 1000


def match_loops(ops):
    """Map every bracket position to the position of its partner."""
    jumps = {}
    stack = []
    for i, op in enumerate(ops):
        if op is Op.LOOP_START:
            stack.append(i)
        elif op is Op.LOOP_END:
            if not stack:
                raise UnmatchedLoopEnd()
            start = stack.pop()
            jumps[start] = i
            jumps[i] = start
    if stack:
        raise UnmatchedLoopStart()
    return jumps


def check_balance(source):
    """Fail fast on a one-shot command whose brackets do not pair up."""
    match_loops([decode(c) for c in source])


def run_loop(machine, ops):
    """
    Replay a complete loop construct `[...]` against the machine.

    Nothing runs when the current cell is zero. Otherwise a stack of open
    `[` positions drives the jumps: a `]` with a non-zero cell goes back to
    just after its `[`, a `]` with a zero cell pops and falls through. An
    inner `[` entered on a zero cell is skipped to its partner.
    """
    if not ops or machine.current == 0:
        return
    jumps = match_loops(ops)
    stack = []
    pc = 0
    while pc < len(ops):
        op = ops[pc]
        if op is Op.LOOP_START:
            if machine.current == 0:
                pc = jumps[pc] + 1
                continue
            stack.append(pc)
            pc += 1
        elif op is Op.LOOP_END:
            if machine.current != 0:
                pc = stack[-1] + 1
            else:
                stack.pop()
                pc += 1
        else:
            machine.execute(op)
            pc += 1


class Interpreter:
    """One interpreter session: a tape machine plus the pending-loop state."""

    def __init__(self, input_handler, output_handler, tape_size=TAPE_SIZE,
                 loop_buffer_size=LOOP_BUFFER_SIZE,
                 max_loop_depth=MAX_LOOP_DEPTH, trace=None):
        self.machine = TapeMachine(input_handler, output_handler, tape_size)
        self.loop_buffer = []
        self.loop_buffer_size = loop_buffer_size
        self.unmatched_depth = 0
        self.max_loop_depth = max_loop_depth
        self.trace = trace

    @property
    def pending(self):
        return ''.join(op.value for op in self.loop_buffer)

    def feed(self, char):
        op = decode(char)
        if op is not None:
            if self.unmatched_depth == 0:
                if op is Op.LOOP_START:
                    self._open_loop()
                elif op is Op.LOOP_END:
                    raise UnmatchedLoopEnd()
                else:
                    self.machine.execute(op)
            elif op is Op.LOOP_START:
                self._open_loop()
            elif op is Op.LOOP_END:
                self._close_loop()
            else:
                self._enqueue(op)
        if self.trace is not None:
            self.trace(self)

    def feed_line(self, line):
        for char in line:
            self.feed(char)

    # A one-shot command feeds exactly like a line.
    feed_string = feed_line

    def finish(self):
        """End of input for a file or command run."""
        if self.unmatched_depth:
            raise UnmatchedLoopStart()

    def reset_loop(self):
        """Drop the pending loop. The tape and pointer are left alone."""
        self.loop_buffer = []
        self.unmatched_depth = 0

    def _enqueue(self, op):
        if len(self.loop_buffer) >= self.loop_buffer_size:
            raise LoopBufferFull()
        self.loop_buffer.append(op)

    def _open_loop(self):
        if self.unmatched_depth >= self.max_loop_depth:
            raise LoopDepthExceeded()
        self._enqueue(Op.LOOP_START)
        self.unmatched_depth += 1

    def _close_loop(self):
        self._enqueue(Op.LOOP_END)
        self.unmatched_depth -= 1
        if self.unmatched_depth == 0:
            try:
                run_loop(self.machine, self.loop_buffer)
            finally:
                self.loop_buffer = []
