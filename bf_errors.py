"""
Errors raised by the interpreter core and the runner.

Every error carries the message the console prints after "Error: ".
"""


class BrainfuckError(Exception):
    message = 'Brainfuck error.'

    def __init__(self, message=None):
        super().__init__(message or self.message)


class UnmatchedLoopEnd(BrainfuckError):
    message = 'Unmatched loop end.'


class UnmatchedLoopStart(BrainfuckError):
    message = 'Unmatched loop start.'


class LoopDepthExceeded(BrainfuckError):
    message = 'Max loop depth exceeded.'


class LoopBufferFull(BrainfuckError):
    message = 'Max loop size exceeded.'


class LineTooLong(BrainfuckError):
    message = 'Max line length exceeded.'


class UnexpectedEndOfInput(BrainfuckError):
    message = 'Unexpected end of input.'


class OutputFailure(BrainfuckError):
    message = 'Output failed.'
