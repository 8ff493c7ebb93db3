"""
SQL text helpers.
"""
import re

__all__ = ['quote_identifier', 'normalize_query', 'select_list', 'cast_type']

_TRAILING_TERMINATORS = re.compile(r'[\s;]+$')

_QUOTES = {"'": "'", '"': '"', '`': '`', '[': ']'}

_SELECT_HEAD = re.compile(r'\s*SELECT\s+(?:DISTINCT\s+|ALL\s+)?', re.I)

_SELECT_END = re.compile(
    r'\b(?:FROM|WHERE|GROUP|HAVING|WINDOW|ORDER|LIMIT|UNION|INTERSECT|EXCEPT)\b', re.I)

_CAST_HEAD = re.compile(r'CAST\s*\(', re.I)

_ALIAS = re.compile(
    r'\s*(?:(?:AS\s+)?(?:\w+|"(?:[^"]|"")*"|`[^`]*`|\[[^\]]*\]|\'(?:[^\']|\'\')*\'))?\s*', re.I)


def quote_identifier(identifier: str, quote: str = '"') -> str:
    """Quote an identifier with the given quote character.

    Embedded quote characters are doubled.

    Parameters
        identifier: Schema, table or column name
        quote: Identifier quote character reported by the connection

    Returns
        Quoted identifier
    """
    if not quote:
        raise ValueError('Connection does not support quoted identifiers')
    return quote + identifier.replace(quote, quote * 2) + quote


def normalize_query(query: str) -> str:
    """Strip surrounding whitespace and trailing statement terminators.

    The query is embedded in wrapping statements (subselects, views), where
    a trailing semicolon is a syntax error.
    """
    return _TRAILING_TERMINATORS.sub('', query.strip())


def _scan(text: str):
    """Yield (position, char, depth) for characters outside quotes and comments.

    Both parentheses of a group report the depth outside the group.
    """
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            end = text.find(_QUOTES[ch], i + 1)
            i = len(text) if end < 0 else end + 1
            continue
        if text.startswith('--', i):
            end = text.find('\n', i)
            i = len(text) if end < 0 else end
            continue
        if text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = len(text) if end < 0 else end + 2
            continue
        if ch == '(':
            yield i, ch, depth
            depth += 1
        elif ch == ')':
            depth -= 1
            yield i, ch, depth
        else:
            yield i, ch, depth
        i += 1


def _mask(text: str) -> str:
    """Blank out everything that is not at paren depth 0, keeping positions."""
    chars = [' '] * len(text)
    for i, ch, depth in _scan(text):
        if depth == 0:
            chars[i] = ch
    return ''.join(chars)


def select_list(query: str) -> list[str] | None:
    """Expressions of the outermost select list, in order.

    Returns None when the query does not start with SELECT (for example a
    WITH or VALUES query).

    >>> select_list('select a, f(b, c) as d from t')
    ['a', 'f(b, c) as d']
    """
    text = normalize_query(query)
    masked = _mask(text)
    head = _SELECT_HEAD.match(masked)
    if not head:
        return None
    end = _SELECT_END.search(masked, head.end())
    stop = end.start() if end else len(text)
    items, start = [], head.end()
    for i in range(head.end(), stop):
        if masked[i] == ',':
            items.append(text[start:i].strip())
            start = i + 1
    items.append(text[start:stop].strip())
    return items


def cast_type(expression: str) -> str | None:
    """Target type of a select expression that is a bare CAST, else None.

    >>> cast_type('cast(count(*) as integer) as n')
    'integer'
    >>> cast_type('cast(a as text) || b') is None
    True
    """
    head = _CAST_HEAD.match(expression.strip())
    if not head:
        return None
    expression = expression.strip()
    opening = head.end() - 1
    closing = next((i for i, ch, depth in _scan(expression)
                    if ch == ')' and depth == 0 and i > opening), None)
    if closing is None or not _ALIAS.fullmatch(expression[closing + 1:]):
        return None
    inner = expression[opening + 1:closing]
    keywords = list(re.finditer(r'\bAS\b', _mask(inner), re.I))
    if not keywords:
        return None
    return inner[keywords[-1].end():].strip() or None
