import io

import pytest

from bf_errors import OutputFailure, UnexpectedEndOfInput
from bf_machine import Op, TapeMachine, decode, stream_input, stream_output


def make_machine(inputs=(), tape_size=30000):
    feed = list(inputs)
    out = []
    machine = TapeMachine(lambda: feed.pop(0) if feed else None, out.append, tape_size)
    return machine, out


def test_decode_maps_instructions_and_ignores_commentary():
    assert decode('+') is Op.PLUS
    assert decode(']') is Op.LOOP_END
    assert decode('a') is None
    assert decode('\n') is None


def test_cell_wraps_both_ways():
    machine, _ = make_machine()
    machine.decrement()
    assert machine.current == 255
    machine.increment()
    assert machine.current == 0


@pytest.mark.parametrize('ups,downs', [(0, 0), (300, 0), (5, 9), (256, 1), (1, 513)])
def test_cell_value_is_net_count_mod_256(ups, downs):
    machine, _ = make_machine()
    for _ in range(ups):
        machine.execute(Op.PLUS)
    for _ in range(downs):
        machine.execute(Op.MINUS)
    assert machine.current == (ups - downs) % 256


@pytest.mark.parametrize('start,moves', [(0, -1), (9, 1), (3, -25), (0, 47), (5, 0)])
def test_pointer_wraps_circularly(start, moves):
    machine, _ = make_machine(tape_size=10)
    machine.ptr = start
    op = Op.NEXT if moves > 0 else Op.PREVIOUS
    for _ in range(abs(moves)):
        machine.execute(op)
    assert machine.ptr == (start + moves) % 10


def test_read_and_write_bytes():
    machine, out = make_machine(inputs=[65])
    machine.execute(Op.INPUT)
    machine.execute(Op.OUTPUT)
    assert out == [65]
    assert machine.step_count == 2


def test_read_past_end_of_input():
    machine, _ = make_machine()
    machine.tape[0] = 7
    with pytest.raises(UnexpectedEndOfInput):
        machine.read_byte()
    assert machine.current == 7


def test_write_to_closed_sink():
    sink = io.BytesIO()
    sink.close()
    machine = TapeMachine(lambda: None, stream_output(sink))
    with pytest.raises(OutputFailure):
        machine.write_byte()


def test_stream_handlers():
    source = stream_input(io.BytesIO(b'hi'))
    assert [source(), source(), source()] == [ord('h'), ord('i'), None]
    sink = io.BytesIO()
    stream_output(sink)(200)
    assert sink.getvalue() == bytes([200])


def test_loop_ops_are_not_tape_instructions():
    machine, _ = make_machine()
    with pytest.raises(ValueError):
        machine.execute(Op.LOOP_START)


def test_rejects_empty_tape():
    with pytest.raises(ValueError):
        make_machine(tape_size=0)
