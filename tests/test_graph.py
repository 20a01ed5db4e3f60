import textwrap

import pytest

from gasmeter.errors import TrailingLabelsError, UndefinedLabelError
from gasmeter.graph import build_block_graph, build_cfg
from gasmeter.parser import ParsedAssembly


def cfg_of(text):
    return build_cfg(ParsedAssembly.parse(textwrap.dedent(text)))


NESTED = """\
.Louter:
    mov x1, #0
.Linner:
    add x1, x1, #1
    nop
    nop
    cmp x1, #10
    b.lt .Linner
    add x0, x0, #1
    cmp x0, #10
    b.lt .Louter
    ret
"""


def test_nested_loop_instruction_counts():
    cfg = cfg_of(NESTED).cfg
    back_edges = [b for b in cfg.blocks() if cfg.has_back_edge(b)]
    pairs = sorted(
        (cfg.back_edge_target(b), cfg.instruction_count(b)) for b in back_edges
    )
    assert pairs == [(0, 3), (1, 5)]


def test_blocks_partition_instructions():
    result = cfg_of(NESTED)
    cfg = result.cfg
    total = sum(cfg.instruction_count(b) for b in cfg.blocks())
    assert total == len(result.resolved)
    starts = [cfg[b].start for b in cfg.blocks()]
    assert starts == sorted(starts)
    for block in list(cfg.blocks())[:-1]:
        assert cfg[block].end == cfg[block + 1].start


def test_terminator_maps_to_branch():
    result = cfg_of(NESTED)
    cfg = result.cfg
    for block in cfg.blocks():
        if cfg.has_back_edge(block):
            term = cfg.terminator_index(block)
            assert result.resolved[term].mnemonic == "b.lt"
            assert term == cfg[block].end - 1


def test_self_loop_is_back_edge():
    cfg = cfg_of(".Lspin:\n    b .Lspin\n").cfg
    assert cfg.has_back_edge(0)
    assert cfg.back_edge_target(0) == 0
    assert cfg.instruction_count(0) == 1


def test_forward_branch_is_not_back_edge():
    cfg = cfg_of(
        """\
            cbz x0, .Lskip
            add x0, x0, #1
        .Lskip:
            ret
        """
    ).cfg
    assert not any(cfg.has_back_edge(b) for b in cfg.blocks())


def test_code_after_ret_is_unreachable():
    cfg = cfg_of(
        """\
        _first:
            mov x0, #0
        .La:
            add x0, x0, #1
            cmp x0, #10
            b.lt .La
            ret
        _second:
            mov x1, #0
        .Lb:
            add x1, x1, #1
            cmp x1, #10
            b.lt .Lb
            ret
        """
    ).cfg
    back_edges = [b for b in cfg.blocks() if cfg.has_back_edge(b)]
    assert len(back_edges) == 1
    assert cfg.back_edge_target(back_edges[0]) == 1


def test_call_does_not_end_block():
    result = cfg_of(
        """\
        .Lloop:
            bl _helper
            add x0, x0, #1
            b.lt .Lloop
            ret
        _helper:
            ret
        """
    )
    cfg = result.cfg
    back_edges = [b for b in cfg.blocks() if cfg.has_back_edge(b)]
    assert len(back_edges) == 1
    assert cfg.instruction_count(back_edges[0]) == 3


def test_straight_line_code_is_one_block():
    result = cfg_of("nop\n" * 50)
    assert len(result.cfg) == 1
    assert result.cfg.instruction_count(0) == 50
    assert result.cfg.terminator_index(0) is None


def test_empty_input_has_no_blocks():
    assert list(build_block_graph([]).blocks()) == []


def test_undefined_label_raises():
    with pytest.raises(UndefinedLabelError) as info:
        cfg_of(".Lloop:\n    add x0, x0, #1\n    b .Ltypo\n")
    assert info.value.label == ".Ltypo"


def test_trailing_label_raises():
    with pytest.raises(TrailingLabelsError):
        cfg_of("    mov x0, #0\n.Ldangling:\n")