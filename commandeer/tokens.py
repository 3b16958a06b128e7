r"""
Shell-like tokenizer for raw argument lines.

Rules
- Tokens are separated by ASCII whitespace found outside of quotes.
- '...' spans are literal: no escape is processed inside single quotes.
- "..." spans only honour \" and \\; any other backslash sequence is kept
  verbatim, backslash included.
- Outside quotes, a backslash escapes the next character whatever it is,
  which lets a space be embedded in an unquoted token (a\ b -> "a b").
- Quoted spans glue to their neighbours: a'b c'd -> "ab cd".
- An empty quoted span still produces a token: '' -> "".

Leniency
- An unterminated quote or a dangling backslash at the end of the input does
  not fail: the partial token accumulated so far is emitted (a dangling escape
  keeps its backslash). tokenize() never raises for string input.

Examples
    >>> tokenize("a b c")
    ['a', 'b', 'c']
    >>> tokenize("'a b' c")
    ['a b', 'c']
    >>> tokenize('"a\\"b" c')
    ['a"b', 'c']
"""
from enum import Enum, auto

WHITESPACES = frozenset(" \t\n\r\f\v")


class _State(Enum):
    NEW_TOKEN = auto()  # between tokens
    CONTINUE = auto()  # inside an unquoted (or quote-glued) token
    SINGLE_QUOTES = auto()
    DOUBLE_QUOTES = auto()


def tokenize(line, /):
    """
    Split a raw argument line into a list of tokens (see module docs for rules).

    Parameters
    - line: str
      The raw argument string, without the command name.

    Returns
    - list[str]: tokens in input order; [] for empty or blank input.

    Raises
    - TypeError: when line is not a string.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    tokens = []
    token = []
    state = _State.NEW_TOKEN
    escaped = False
    index = 0

    while index < len(line):
        char = line[index]
        index += 1

        if escaped:
            escaped = False
            token.append(char)
            continue

        match state:
            case _State.NEW_TOKEN | _State.CONTINUE:
                if char == "\\":
                    escaped = True
                    state = _State.CONTINUE
                elif char == "'":
                    state = _State.SINGLE_QUOTES
                elif char == '"':
                    state = _State.DOUBLE_QUOTES
                elif char not in WHITESPACES:
                    token.append(char)
                    state = _State.CONTINUE
                elif state is _State.CONTINUE:
                    tokens.append("".join(token))
                    token.clear()
                    state = _State.NEW_TOKEN
            case _State.SINGLE_QUOTES:
                if char == "'":
                    state = _State.CONTINUE
                else:
                    token.append(char)
            case _State.DOUBLE_QUOTES:
                if char == '"':
                    state = _State.CONTINUE
                elif char == "\\":
                    # A backslash closing the input is kept as-is.
                    if index == len(line):
                        token.append(char)
                    elif (following := line[index]) in ('"', "\\"):
                        token.append(following)
                        index += 1
                    else:
                        token.append(char)
                        token.append(following)
                        index += 1
                else:
                    token.append(char)

    if escaped:
        token.append("\\")
        tokens.append("".join(token))
    elif state is not _State.NEW_TOKEN:
        tokens.append("".join(token))

    return tokens


__all__ = (
    "tokenize",
)
