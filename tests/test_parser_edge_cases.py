from issuecsv.parser import parse_csv, split_rows


def test_escaped_quote_inside_quoted_field() -> None:
    rows = split_rows('a,"b""c",d\ne\n')
    assert rows == [['a', 'b"c', 'd'], ['e']]


def test_newline_inside_quotes_is_literal() -> None:
    rows = split_rows('"line1\nline2",x\n')
    assert rows == [['line1\nline2', 'x']]


def test_line_endings_crlf_lf_and_bare_cr() -> None:
    rows = split_rows('a,b\r\nc,d\ne,f\rg,h')
    assert rows == [['a', 'b'], ['c', 'd'], ['e', 'f'], ['g', 'h']]


def test_no_trailing_newline_flushes_last_row() -> None:
    assert split_rows('a,b\nc') == [['a', 'b'], ['c']]


def test_trailing_comma_flushes_empty_last_field() -> None:
    assert split_rows('a,') == [['a', '']]


def test_trailing_newline_adds_no_extra_row() -> None:
    assert split_rows('a\n') == [['a']]


def test_blank_line_yields_single_empty_field_row() -> None:
    assert split_rows('a\n\nb\n') == [['a'], [''], ['b']]


def test_unterminated_quote_consumes_to_end() -> None:
    assert split_rows('a,"b,c\nd') == [['a', 'b,c\nd']]


def test_quotes_mid_field_toggle_quoted_mode() -> None:
    assert split_rows('ab"c,d"e,f') == [['abc,de', 'f']]


def test_ragged_rows_are_accepted() -> None:
    assert split_rows('a,b,c\nd\ne,f') == [['a', 'b', 'c'], ['d'], ['e', 'f']]


def test_multiline_description_round_trip() -> None:
    text = 'Summary,Project,Description\r\nS,P,"first ""quoted""\r\nsecond"\r\n'
    record = parse_csv(text)[0]
    assert record.description == 'first "quoted"\r\nsecond'
