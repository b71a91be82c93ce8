"""
Diagnostic dump of interpreter state, and terminal colouring for messages.
"""

import sys


class Colors:
    CYAN = '\033[96m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    REVERSE = '\033[7m'


def use_color(stream):
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def paint(text, color, enabled=True):
    if not enabled:
        return text
    return f"{color}{text}{Colors.ENDC}"


def format_cells(machine, start, count, color=False):
    """Render `count` cells from `start`, marking the cell under the pointer."""
    cells = []
    for i in range(start, min(len(machine.tape), start + count)):
        val = f"{machine.tape[i]:03}"
        if i == machine.ptr:
            cells.append(paint(f"[{val}]", Colors.REVERSE, color))
        else:
            cells.append(f" {val} ")
    return " ".join(cells)


def format_state(interp, window=8, color=False):
    machine = interp.machine
    start = max(0, machine.ptr - window)
    lines = [
        paint(f"--- Step {machine.step_count} ---", Colors.BOLD, color),
        f"Ptr: {machine.ptr}",
        f"Loc: {format_cells(machine, start, 2 * window + 1, color)}",
    ]
    if interp.unmatched_depth:
        pending = paint(interp.pending, Colors.CYAN, color)
        lines.append(f"Loop: depth {interp.unmatched_depth}, pending {pending}")
    return "\n".join(lines)


def print_state(interp, stream=None):
    stream = stream or sys.stderr
    print(format_state(interp, color=use_color(stream)), file=stream)


def print_error(error, stream=None):
    stream = stream or sys.stderr
    print(paint(f"Error: {error}", Colors.FAIL, use_color(stream)), file=stream)
