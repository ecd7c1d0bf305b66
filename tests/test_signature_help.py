from cfml_ls.analysis.signature_help import signature_help_for_position

DEFS = (
    "public string function greet(string name, numeric times) {}\n"
    "public void function outer(a, b) {}\n"
    "public void function inner(x) {}\n"
)


def _help(call: str):
    source = DEFS + call
    return signature_help_for_position(source, DEFS.count("\n"), len(call))


def test_signature_help_tracks_active_parameter():
    help_ = _help('greet("a", ')
    assert help_ is not None
    assert help_.signatures[0].label == "greet(string name, numeric times): string"
    assert [p.label for p in help_.signatures[0].parameters] == ["string name", "numeric times"]
    assert help_.active_parameter == 1


def test_signature_help_prefers_innermost_open_call():
    help_ = _help("outer(inner(")
    assert help_ is not None
    assert help_.signatures[0].label.startswith("inner(")
    assert help_.active_parameter == 0


def test_signature_help_skips_closed_calls():
    help_ = _help("outer(inner(1), ")
    assert help_ is not None
    assert help_.signatures[0].label.startswith("outer(")
    assert help_.active_parameter == 1


def test_signature_help_ignores_commas_in_strings():
    help_ = _help('greet("a, b')
    assert help_ is not None
    assert help_.active_parameter == 0


def test_signature_help_clamps_to_last_parameter():
    help_ = _help("inner(1, 2, ")
    assert help_ is not None
    assert help_.active_parameter == 0


def test_signature_help_unknown_function():
    assert _help("writeOutput(") is None


def test_signature_help_outside_call():
    assert _help("x = 1;") is None
