import re
from urllib.parse import SplitResult, quote_plus, unquote_plus, urlsplit, urlunsplit
from typing import Dict, List, Mapping, NamedTuple, Sequence, Union


QueryDict = Dict[str, List[str]]
Query = Mapping[str, Union[str, Sequence[str]]]

_invalid_chars = re.compile(r"[\x00-\x1f\x7f]")
_invalid_escape = re.compile(r"%(?![0-9A-Fa-f]{2})")

class UnparsableURL(ValueError):
    pass

class ParsedURL(NamedTuple):
    parts: SplitResult
    path: str
    query: QueryDict

    def with_query(self, **params: str) -> str:
        """Return the absolute URL with 'params' set, replacing any existing values of the same names."""
        query = {name: list(values) for name, values in self.query.items()}
        for name, value in params.items():
            query[name] = [value]
        return urlunsplit(self.parts._replace(query=encode_query(query)))

def as_values(values: Union[str, Sequence[str]]) -> Sequence[str]:
    # A bare string is a single value, not a sequence of characters
    if isinstance(values, str):
        return [values]
    return values

def parse_query(raw_query: str) -> QueryDict:
    """Parse a raw query string into a multi-map, keeping blank values and the order of appearance."""
    query: QueryDict = dict()
    for pair in raw_query.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        query.setdefault(unquote_plus(name), list()).append(unquote_plus(value))
    return query

def encode_query(query: Query) -> str:
    """Encode 'query' sorted by name, one 'name=value' pair per value. A plain string value is a single value."""
    pairs = list()
    for name in sorted(query):
        ename = quote_plus(name, safe="")
        for value in as_values(query[name]):
            pairs.append(f"{ename}={quote_plus(value, safe='')}")
    return "&".join(pairs)

def parse_url(url: str) -> ParsedURL:
    """Parse an absolute URL, keeping the path in its percent-encoded wire form. Literal spaces in the path and
    fragment are escaped as '%20'.

    Raise UnparsableURL for anything that could not be sent.
    """
    if _invalid_chars.search(url):
        raise UnparsableURL(f"Invalid character in url '{url}'")
    if url != url.strip():
        raise UnparsableURL(f"Leading or trailing space in url '{url}'")
    try:
        parts = urlsplit(url)
        parts.port  # raises for a malformed port
    except ValueError as e:
        raise UnparsableURL(f"Unable to parse url '{url}': {e}") from e
    if not parts.scheme:
        raise UnparsableURL(f"Missing scheme in url '{url}'")
    if not parts.hostname or " " in parts.netloc:
        raise UnparsableURL(f"Missing or invalid host in url '{url}'")
    if _invalid_escape.search(parts.path):
        raise UnparsableURL(f"Invalid percent-escape in path of url '{url}'")
    parts = parts._replace(path=parts.path.replace(" ", "%20"), fragment=parts.fragment.replace(" ", "%20"))
    return ParsedURL(parts, parts.path, parse_query(parts.query))
