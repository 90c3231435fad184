import pytest
from korvaq.errors import LexerError
from korvaq.lexer import Tokenizer, TokenKind, tokenize


def kinds(source):
    return [t.kind for t in tokenize(source)]


def test_declaration_tokens():
    tokens = tokenize('let x = 5.5')
    assert [t.kind for t in tokens] == [TokenKind.LET, TokenKind.IDENTIFIER, TokenKind.ASSIGN, TokenKind.NUMBER]
    assert tokens[1].literal == 'x'
    assert tokens[3].literal == 5.5
    assert tokens[3].position == 8


def test_semicolons_and_comments_are_skipped():
    source = 'show 1; // trailing comment\n;; show 2'
    assert kinds(source) == [TokenKind.SHOW, TokenKind.NUMBER, TokenKind.SHOW, TokenKind.NUMBER]


def test_number_takes_only_first_decimal_point():
    tokenizer = Tokenizer('1.2.3')
    assert tokenizer.next_token().literal == 1.2
    # the second '.' is not a valid character on its own
    with pytest.raises(LexerError):
        tokenizer.next_token()
    assert tokenize('5.')[0].literal == 5.0


def test_three_quote_styles_are_raw():
    tokens = tokenize('"a\\n" \'b\' `c\nd`')
    assert [t.literal for t in tokens] == ['a\\n', 'b', 'c\nd']
    assert all(t.kind == TokenKind.STRING for t in tokens)


def test_unterminated_string():
    with pytest.raises(LexerError) as excinfo:
        tokenize('show "oops')
    assert excinfo.value.kind == 'LexicalError'
    assert 'unterminated' in excinfo.value.message


def test_booleans_are_whole_words():
    tokens = tokenize('true false trueish')
    assert [t.kind for t in tokens] == [TokenKind.BOOLEAN, TokenKind.BOOLEAN, TokenKind.IDENTIFIER]
    assert tokens[0].literal is True
    assert tokens[1].literal is False


@pytest.mark.parametrize('word', ['var', 'const', 'for', 'class', 'this', 'try'])
def test_restricted_words(word):
    with pytest.raises(LexerError) as excinfo:
        tokenize(f'let {word} = 1')
    assert f'restricted keyword used: {word}' in excinfo.value.message


def test_multi_character_operators():
    tokens = tokenize('a === b !== c == d != e >= f <= g && h || i ** j')
    operators = [t.literal for t in tokens if t.kind == TokenKind.OPERATOR]
    assert operators == ['===', '!==', '==', '!=', '>=', '<=', '&&', '||', '**']


def test_assign_and_not_are_distinct_from_operators():
    assert kinds('x = !y') == [TokenKind.IDENTIFIER, TokenKind.ASSIGN, TokenKind.NOT, TokenKind.IDENTIFIER]


def test_unexpected_character_reports_location():
    with pytest.raises(LexerError) as excinfo:
        tokenize('show 1\nshow @')
    assert "'@'" in excinfo.value.message
    assert '2:6' in excinfo.value.message


def test_lone_ampersand_is_rejected():
    with pytest.raises(LexerError):
        tokenize('a & b')


def test_end_of_input_is_none():
    tokenizer = Tokenizer('  // only a comment')
    assert tokenizer.next_token() is None
    assert tokenizer.next_token() is None


def test_tokenizer_is_lazy():
    tokenizer = Tokenizer('show 1 @')
    it = iter(tokenizer)
    assert next(it).kind == TokenKind.SHOW
    assert next(it).kind == TokenKind.NUMBER
    with pytest.raises(LexerError):
        next(it)


def test_location():
    tokenizer = Tokenizer('a\nbc\nd')
    assert tokenizer.location(0) == (1, 1)
    assert tokenizer.location(3) == (2, 2)
    assert tokenizer.location(5) == (3, 1)
