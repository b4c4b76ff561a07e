from studio.search import find_next, find_prev, replace_all

TEXT = "abc ABC abc"


def test_find_next_is_case_insensitive():
    assert find_next(TEXT, "abc", 1) == (4, 7)
    assert find_next(TEXT, "ABC", 0) == (0, 3)


def test_find_next_wraps_to_start():
    assert find_next(TEXT, "abc", 9) == (0, 3)
    assert find_next(TEXT, "xyz", 0) is None


def test_find_prev_searches_backward():
    assert find_prev(TEXT, "abc", 11) == (8, 11)
    assert find_prev(TEXT, "abc", 8) == (4, 7)
    assert find_prev(TEXT, "abc", 1) == (0, 3)


def test_find_prev_does_not_wrap():
    # from the start of the text only a match at index 0 is reachable
    assert find_prev("xx abc", "abc", 2) is None
    assert find_prev("abc abc", "abc", 0) == (0, 3)
    assert find_prev("x abc", "abc", 0) is None


def test_empty_query_is_noop():
    assert find_next(TEXT, "", 0) is None
    assert find_prev(TEXT, "", 5) is None
    assert replace_all(TEXT, "", "x") == TEXT


def test_replace_all_is_literal():
    assert replace_all("a.b.c", ".", "_") == "a_b_c"
    assert replace_all("f(x) + f(x)", "f(x)", "g") == "g + g"


def test_replace_all_ignores_case():
    assert replace_all("Foo foo FOO", "foo", "bar") == "bar bar bar"


def test_replacement_is_not_a_template():
    assert replace_all("a-b", "-", r"\1$&") == r"a\1$&b"
