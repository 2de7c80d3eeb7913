import logging
import re
from typing import Iterator, List, Mapping, NamedTuple, Optional, Union

from .exceptions import ParseError, UnresolvedVariableError

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Longest operators first so ':-' is not read as ':'
OPERATORS = (":-", ":?", "-", "?")


class Placeholder(NamedTuple):
    """
    One variable reference inside a template.

    `operator` is None for `$NAME` / `${NAME}`, otherwise one of
    ':-' / '-' (default value) or ':?' / '?' (error message).
    """
    name: str
    operator: Optional[str] = None
    argument: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.operator in (":-", "-")

    @property
    def is_required(self) -> bool:
        return not self.has_default


Token = Union[str, Placeholder]


def _find_closing_brace(template: str, start: int) -> int:
    """Return the index of the '}' closing the '${' that ends right before `start`."""
    depth = 1
    i = start
    while i < len(template):
        if template.startswith("${", i):
            depth += 1
            i += 2
            continue
        if template[i] == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise ParseError(f"Invalid interpolation format in '{template}': unterminated '${{'.")


def _parse_braced(template: str, body: str) -> Placeholder:
    match = NAME_PATTERN.match(body)
    if not match:
        raise ParseError(f"Invalid interpolation format in '{template}': '${{{body}}}' has no valid variable name.")
    name = match.group(0)
    rest = body[match.end():]
    if not rest:
        return Placeholder(name)
    for op in OPERATORS:
        if rest.startswith(op):
            argument = rest[len(op):]
            if op in (":-", "-"):
                # defaults may carry placeholders of their own
                validate_template(argument)
            return Placeholder(name, op, argument)
    raise ParseError(f"Invalid interpolation format in '{template}': unexpected '{rest}' after '{name}'.")


def tokenize(template: str) -> Iterator[Token]:
    """
    Split a template into literal strings and Placeholder tuples.

    Supports `$NAME`, `${NAME}`, `${NAME:-default}`, `${NAME-default}`,
    `${NAME:?message}`, `${NAME?message}` and the `$$` escape.
    """
    literal: List[str] = []
    i = 0
    n = len(template)
    while i < n:
        char = template[i]
        if char != "$":
            literal.append(char)
            i += 1
            continue

        if i + 1 >= n:
            raise ParseError(f"Invalid interpolation format in '{template}': dangling '$' at end.")

        nxt = template[i + 1]
        if nxt == "$":
            literal.append("$")
            i += 2
            continue

        if literal:
            yield "".join(literal)
            literal = []

        if nxt == "{":
            end = _find_closing_brace(template, i + 2)
            yield _parse_braced(template, template[i + 2:end])
            i = end + 1
        else:
            match = NAME_PATTERN.match(template, i + 1)
            if not match:
                raise ParseError(f"Invalid interpolation format in '{template}': '$' must be followed by a name, '{{' or '$'.")
            yield Placeholder(match.group(0))
            i = match.end()

    if literal:
        yield "".join(literal)


def validate_template(template: str) -> None:
    """Raise ParseError if `template` contains a malformed placeholder."""
    for _ in tokenize(template):
        pass


def placeholders(template: str) -> List[Placeholder]:
    return [tok for tok in tokenize(template) if isinstance(tok, Placeholder)]


def variables(template: str) -> List[str]:
    """All variable names referenced by `template`, defaults included, in order of appearance."""
    names: List[str] = []
    for ph in placeholders(template):
        if ph.name not in names:
            names.append(ph.name)
        if ph.has_default and ph.argument:
            for nested in variables(ph.argument):
                if nested not in names:
                    names.append(nested)
    return names


def required_variables(template: str) -> List[str]:
    """Variable names that must be present for `template` to resolve."""
    names: List[str] = []
    for ph in placeholders(template):
        if ph.is_required and ph.name not in names:
            names.append(ph.name)
    return names


def _resolve_placeholder(ph: Placeholder, environment: Mapping[str, str]) -> str:
    value = environment.get(ph.name)

    if ph.operator is None:
        if value is None:
            raise UnresolvedVariableError(ph.name)
        logger.debug(f"[Interpolate] variable '{ph.name}' -> '{value}'.")
        return value

    if ph.operator == ":-" and not value:
        logger.debug(f"[Interpolate] variable '{ph.name}' unset or empty, using default '{ph.argument}'.")
        return interpolate(ph.argument, environment)
    if ph.operator == "-" and value is None:
        logger.debug(f"[Interpolate] variable '{ph.name}' unset, using default '{ph.argument}'.")
        return interpolate(ph.argument, environment)
    if ph.operator == ":?" and not value:
        raise UnresolvedVariableError(ph.name, ph.argument or None)
    if ph.operator == "?" and value is None:
        raise UnresolvedVariableError(ph.name, ph.argument or None)

    logger.debug(f"[Interpolate] variable '{ph.name}' -> '{value}'.")
    return value


def interpolate(template: str, environment: Mapping[str, str]) -> str:
    """
    Substitute every placeholder in `template` from `environment`.

    Raises UnresolvedVariableError naming the first required variable that is
    absent, and ParseError for malformed templates.
    """
    parts: List[str] = []
    for tok in tokenize(template):
        if isinstance(tok, Placeholder):
            parts.append(_resolve_placeholder(tok, environment))
        else:
            parts.append(tok)
    return "".join(parts)


def unresolved_variables(template: str, environment: Mapping[str, str]) -> List[str]:
    """Names whose absence would make `interpolate(template, environment)` fail."""
    names: List[str] = []
    for ph in placeholders(template):
        value = environment.get(ph.name)
        if ph.operator in (None, "?"):
            failed = value is None
        elif ph.operator == ":?":
            failed = not value
        else:
            failed = False
            taken = not value if ph.operator == ":-" else value is None
            if taken:
                for nested in unresolved_variables(ph.argument, environment):
                    if nested not in names:
                        names.append(nested)
        if failed and ph.name not in names:
            names.append(ph.name)
    return names
