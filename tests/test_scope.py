import pytest

from cfml_ls.analysis.scope import ScopeState


@pytest.mark.parametrize(
    "start, line, expected",
    [
        pytest.param(ScopeState(), "<cfscript>", ScopeState(in_script=True), id="script_open"),
        pytest.param(ScopeState(in_script=True), "</cfscript>", ScopeState(), id="script_close"),
        pytest.param(ScopeState(in_script=True), "x = 1;", ScopeState(in_script=True), id="script_unchanged"),
        pytest.param(ScopeState(), '<cfoutput query="q">', ScopeState(in_output=True), id="output_open_with_attrs"),
        pytest.param(ScopeState(in_output=True), "</cfoutput>", ScopeState(), id="output_close"),
        pytest.param(ScopeState(), "<cfoutput>#x#</cfoutput>", ScopeState(in_output=True), id="open_checked_first"),
        pytest.param(ScopeState(in_script=True), "<cfoutput>", ScopeState(in_script=True, in_output=True), id="independent_flags"),
        pytest.param(ScopeState(), "<CFSCRIPT>", ScopeState(in_script=True), id="markers_case_insensitive"),
    ],
)
def test_scope_transitions(start: ScopeState, line: str, expected: ScopeState):
    assert start.advance(line) == expected


def test_no_nesting():
    state = ScopeState().advance("<cfscript>").advance("<cfscript>").advance("</cfscript>")
    assert not state.in_script
    assert not state.active
