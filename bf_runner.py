#!/usr/bin/env python3
"""
ibf: run brainfuck from a command string, a script file or the console.

    ibf -c '++++[>++++<-]>.'     one-shot command
    ibf hello.bf                 script file
    ibf -                        script from stdin
    ibf                          console when stdin is a terminal

Programs read with `,` and write with `.` through the process's stdin and
stdout. Prompts, errors and debug dumps go to stderr.
"""

import argparse
import contextlib
import os
import platform
import sys
import termios

from bf_debugger import print_error, print_state
from bf_errors import BrainfuckError, LineTooLong, OutputFailure
from bf_interpreter import (
    LOOP_BUFFER_SIZE,
    MAX_LOOP_DEPTH,
    Interpreter,
    check_balance,
)
from bf_machine import TAPE_SIZE, stream_input, stream_output

__version__ = '0.1.0'

MAX_LINE_LENGTH = 1000

PROMPT = '>>> '
CONTINUATION_PROMPT = '... '


def _env_int(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def read_line(stream, max_length=MAX_LINE_LENGTH):
    """
    Read one line from a binary stream, without its terminator.

    Returns None at end of stream. A line longer than `max_length`, not
    counting a `\\n` or `\\r\\n` terminator, is consumed up to its newline
    and reported as LineTooLong.
    """
    data = stream.readline(max_length + 2)
    if not data:
        return None
    terminated = data.endswith(b'\n')
    if terminated:
        data = data[:-1]
    if data.endswith(b'\r'):
        data = data[:-1]
    if len(data) > max_length:
        while not terminated:
            rest = stream.readline(4096)
            terminated = not rest or rest.endswith(b'\n')
        raise LineTooLong()
    return data.decode('utf-8', errors='replace')


def flush_output(stream):
    try:
        stream.flush()
    except (OSError, ValueError) as e:
        raise OutputFailure(f'Output failed: {e}') from e


def flush_input(stream):
    """Discard typed-ahead terminal input, like tcflush(STDIN, TCIFLUSH)."""
    if stream.isatty():
        termios.tcflush(stream.fileno(), termios.TCIFLUSH)


def banner():
    return (f"IBF {__version__} (tags/v{__version__}) "
            f"[Python {platform.python_version()}] on {sys.platform}")


def run_console(interp, stdin, stdout, stderr, max_line_length=MAX_LINE_LENGTH):
    print(banner(), file=stderr)
    print('Press Ctrl-D to exit.', file=stderr)
    while True:
        stderr.write(CONTINUATION_PROMPT if interp.unmatched_depth else PROMPT)
        stderr.flush()
        try:
            line = read_line(stdin, max_line_length)
        except LineTooLong as e:
            # Nothing was fed, so a loop typed on earlier lines stays pending.
            print_error(e, stderr)
            continue
        except KeyboardInterrupt:
            print('\nKeyboardInterrupt', file=stderr)
            interp.reset_loop()
            continue
        if line is None:
            stderr.write('\n')
            break
        try:
            interp.feed_line(line)
            flush_output(stdout)
        except BrainfuckError as e:
            print_error(e, stderr)
            interp.reset_loop()
        except KeyboardInterrupt:
            print('\nKeyboardInterrupt', file=stderr)
            interp.reset_loop()
        flush_input(stdin)


def run_stream(interp, stream, max_line_length=MAX_LINE_LENGTH):
    while True:
        line = read_line(stream, max_line_length)
        if line is None:
            break
        interp.feed_line(line)
    interp.finish()


def run_command(interp, command):
    check_balance(command)
    interp.feed_string(command)
    interp.finish()


def build_parser():
    parser = argparse.ArgumentParser(
        prog='ibf',
        usage='%(prog)s [options] ... [-c cmd | file | -]',
        description='Interactive brainfuck interpreter.',
    )
    parser.add_argument('-v', '--version', action='version',
                        version=f'IBF {__version__}')
    parser.add_argument('-c', '--command', metavar='cmd',
                        help='program passed in as string')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='dump interpreter state after every character')
    parser.add_argument('--tape-size', type=int,
                        default=_env_int('IBF_TAPE_SIZE', TAPE_SIZE))
    parser.add_argument('--loop-buffer-size', type=int,
                        default=_env_int('IBF_LOOP_BUFFER_SIZE', LOOP_BUFFER_SIZE))
    parser.add_argument('--max-loop-depth', type=int,
                        default=_env_int('IBF_MAX_LOOP_DEPTH', MAX_LOOP_DEPTH))
    parser.add_argument('--max-line-length', type=int,
                        default=_env_int('IBF_MAX_LINE_LENGTH', MAX_LINE_LENGTH))
    parser.add_argument('file', nargs='?',
                        help="program read from script file ('-' for stdin)")
    return parser


def main(argv=None, stdin=None, stdout=None, stderr=None):
    stderr = stderr or sys.stderr
    try:
        parser = build_parser()
    except ValueError as e:
        print(f"ibf: {e}", file=stderr)
        return 1
    args = parser.parse_args(argv)
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    if args.tape_size < 1:
        print(f"ibf: tape size must be positive, got {args.tape_size}", file=stderr)
        return 1

    trace = None
    if args.debug:
        trace = lambda interp: print_state(interp, stderr)

    interp = Interpreter(
        stream_input(stdin),
        stream_output(stdout),
        tape_size=args.tape_size,
        loop_buffer_size=args.loop_buffer_size,
        max_loop_depth=args.max_loop_depth,
        trace=trace,
    )
    if args.debug:
        print_state(interp, stderr)

    try:
        if args.command is not None:
            run_command(interp, args.command)
        elif args.file and args.file != '-':
            try:
                f = open(args.file, 'rb')
            except OSError as e:
                print(f"ibf: Cannot open file '{args.file}': "
                      f"[Errno {e.errno}] {e.strerror}", file=stderr)
                return 1
            with f:
                run_stream(interp, f, args.max_line_length)
        elif args.file is None and stdin.isatty():
            run_console(interp, stdin, stdout, stderr, args.max_line_length)
        else:
            run_stream(interp, stdin, args.max_line_length)
        flush_output(stdout)
    except BrainfuckError as e:
        with contextlib.suppress(OSError, ValueError):
            stdout.flush()
        print_error(e, stderr)
        return 1
    except KeyboardInterrupt:
        print('\nKeyboardInterrupt', file=stderr)
        return 130
    return 0


if __name__ == '__main__':
    sys.exit(main())
