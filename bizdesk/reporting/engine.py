"""Query template engine — placeholders, safety gate, parameter schema.

Template authors write `{{name}}` placeholders. Two renderings exist:

- compile_query(): the executed form. Each supplied placeholder becomes a
  psycopg2 binding (`%(name)s`), so values never become SQL text.
  `'{{name}}'` (a placeholder that is a whole string literal) binds without
  its quotes; a placeholder inside a longer literal is spliced in with `||`.
- substitute_placeholders(): the display form. Plain text replacement,
  returned to the user and never executed.

Placeholders without a supplied value are left untouched in both forms.
Both compile_query() and the SELECT-only gate read the text through
sql_segments(), so quotes inside comments, quoted identifiers and
dollar-quoted bodies do not open or close string literals.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Tuple

from .exceptions import SecurityError, ValidationError

PLACEHOLDER_RE = re.compile(r'\{\{(\w+)\}\}')
DOLLAR_TAG_RE = re.compile(r'\$(?:[A-Za-z_]\w*)?\$')

PARAMETER_TYPES = ('date', 'number', 'string', 'select', 'textarea')


@dataclass
class CompiledQuery:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


def placeholder_names(query_text: str) -> List[str]:
    """Distinct placeholder names in order of first appearance."""
    seen = []
    for name in PLACEHOLDER_RE.findall(query_text or ''):
        if name not in seen:
            seen.append(name)
    return seen


def substitute_placeholders(query_text: str, parameters: Dict[str, Any]) -> str:
    """Replace every `{{key}}` with the string form of its value."""
    rendered = query_text or ''
    for key, value in (parameters or {}).items():
        rendered = rendered.replace('{{%s}}' % key, '' if value is None else str(value))
    return rendered


def _quoted_end(text: str, start: int, quote: str, backslash_escapes: bool = False) -> int:
    """Index just past the quoted span opening at `start` (doubled quotes stay inside)."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if backslash_escapes and ch == '\\':
            i += 2
            continue
        if ch == quote:
            if text.startswith(quote * 2, i):
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _block_comment_end(text: str, start: int) -> int:
    depth = 0
    i = start
    n = len(text)
    while i < n:
        if text.startswith('/*', i):
            depth += 1
            i += 2
        elif text.startswith('*/', i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    return n


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in '_$'


def sql_segments(query_text: str) -> List[Tuple[str, str]]:
    """Split SQL text into (kind, chunk) pieces that join back to the input.

    Kinds: 'code', 'literal' ('...'), 'escape_literal' (E'...'),
    'identifier' ("..."), 'dollar' ($tag$...$tag$) and 'comment'
    (-- to end of line, nested /* */).
    """
    text = query_text or ''
    segments = []
    code_start = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        kind = end = None
        if ch == "'":
            escaped = (i > 0 and text[i - 1] in 'eE'
                       and (i < 2 or not _is_word_char(text[i - 2])))
            kind = 'escape_literal' if escaped else 'literal'
            end = _quoted_end(text, i, "'", backslash_escapes=escaped)
        elif ch == '"':
            kind, end = 'identifier', _quoted_end(text, i, '"')
        elif text.startswith('--', i):
            newline = text.find('\n', i)
            kind, end = 'comment', n if newline == -1 else newline
        elif text.startswith('/*', i):
            kind, end = 'comment', _block_comment_end(text, i)
        elif ch == '$' and not (i > 0 and _is_word_char(text[i - 1])):
            tag = DOLLAR_TAG_RE.match(text, i)
            if tag:
                close = text.find(tag.group(0), tag.end())
                kind = 'dollar'
                end = n if close == -1 else close + len(tag.group(0))

        if kind is None:
            i += 1
            continue
        if code_start < i:
            segments.append(('code', text[code_start:i]))
        segments.append((kind, text[i:end]))
        i = code_start = end

    if code_start < n:
        segments.append(('code', text[code_start:]))
    return segments


def _bind(chunk: str, parameters: Dict[str, Any], bound: Dict[str, Any], binding: str) -> str:
    """Replace supplied placeholders in `chunk` with `binding` and escape `%`."""
    out = []
    pos = 0
    for match in PLACEHOLDER_RE.finditer(chunk):
        name = match.group(1)
        if name not in parameters:
            continue
        out.append(chunk[pos:match.start()].replace('%', '%%'))
        out.append(binding.format(name=name))
        bound[name] = parameters[name]
        pos = match.end()
    out.append(chunk[pos:].replace('%', '%%'))
    return ''.join(out)


def compile_query(query_text: str, parameters: Dict[str, Any]) -> CompiledQuery:
    """Turn template text into driver-ready SQL plus its bound values.

    Placeholders in comments, quoted identifiers and dollar-quoted bodies
    are not bound.
    """
    parameters = parameters or {}
    if not any(name in parameters for name in placeholder_names(query_text)):
        # No bindings: psycopg2 leaves the text alone, so no %-escaping either
        return CompiledQuery(query_text)

    out = []
    bound = {}
    for kind, chunk in sql_segments(query_text):
        if kind == 'code':
            out.append(_bind(chunk, parameters, bound, '%({name})s'))
        elif kind in ('literal', 'escape_literal'):
            whole = PLACEHOLDER_RE.fullmatch(chunk[1:-1]) if len(chunk) > 2 and chunk.endswith("'") else None
            if kind == 'literal' and whole and whole.group(1) in parameters:
                # '{{name}}': the literal is exactly the placeholder
                out.append(_bind(chunk[1:-1], parameters, bound, '%({name})s'))
            else:
                out.append(_bind(chunk, parameters, bound, "' || %({name})s || '"))
        else:
            out.append(chunk.replace('%', '%%'))

    if not bound:
        return CompiledQuery(query_text)
    return CompiledQuery(''.join(out), bound)


def _has_second_statement(query_text: str) -> bool:
    """True when a `;` in SQL code is followed by anything but comments."""
    terminated = False
    for kind, chunk in sql_segments(query_text):
        if kind == 'comment':
            continue
        if kind != 'code':
            if terminated:
                return True
            continue
        for ch in chunk:
            if ch == ';':
                terminated = True
            elif terminated and not ch.isspace():
                return True
    return False


def ensure_select_only(query_text: str):
    """Reject anything that is not a single SELECT statement."""
    if not query_text or not query_text.strip().lower().startswith('select'):
        raise SecurityError()
    if _has_second_statement(query_text):
        raise SecurityError()


# ── Parameter schema ──

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_number(name, value):
    if isinstance(value, bool):
        raise ValidationError(f"Parameter '{name}' must be a number")
    if isinstance(value, (int, float)):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Parameter '{name}' must be a number")
    if not number.is_finite():
        raise ValidationError(f"Parameter '{name}' must be a number")
    return int(number) if number == number.to_integral_value() else float(number)


def _coerce_date(name, value):
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        datetime.strptime(str(value).strip(), '%Y-%m-%d')
    except ValueError:
        raise ValidationError(f"Parameter '{name}' must be a date (YYYY-MM-DD)")
    return str(value).strip()


def _select_options(options):
    if not options:
        return []
    if isinstance(options, str):
        return [o.strip() for o in options.split(',') if o.strip()]
    return [str(o) for o in options]


def validate_parameters(schema: Dict[str, Dict[str, Any]], supplied: Dict[str, Any]) -> Dict[str, Any]:
    """Check supplied values against a template's parameter schema.

    Returns a new dict with values coerced to their declared types. Keys
    not declared in the schema pass through unchanged.
    """
    schema = schema or {}
    supplied = supplied or {}
    result = dict(supplied)

    for name, spec in schema.items():
        spec = spec or {}
        value = supplied.get(name)

        if _is_blank(value):
            if spec.get('required'):
                label = spec.get('label') or name
                raise ValidationError(f"Missing required parameter: {label}")
            continue

        param_type = spec.get('type', 'string')
        if param_type == 'number':
            result[name] = _coerce_number(name, value)
        elif param_type == 'date':
            result[name] = _coerce_date(name, value)
        elif param_type == 'select':
            options = _select_options(spec.get('options'))
            if options and str(value) not in options:
                raise ValidationError(
                    f"Parameter '{name}' must be one of: {', '.join(options)}")
            result[name] = str(value)
        elif param_type in ('string', 'textarea'):
            result[name] = str(value)

    return result


def validate_schema(schema) -> Dict[str, Dict[str, Any]]:
    """Validate the shape of a parameter schema before it is stored."""
    if schema is None:
        return {}
    if not isinstance(schema, dict):
        raise ValidationError('Parameters must be an object')
    for name, spec in schema.items():
        if not PLACEHOLDER_RE.fullmatch('{{%s}}' % name):
            raise ValidationError(f"Invalid parameter name: {name}")
        if not isinstance(spec, dict):
            raise ValidationError(f"Parameter '{name}' must be an object")
        param_type = spec.get('type', 'string')
        if param_type not in PARAMETER_TYPES:
            raise ValidationError(
                f"Parameter '{name}' has unknown type '{param_type}'")
    return schema
