"""Serialisation of saved report rows to downloadable formats."""
import csv
import io
import json

from .exceptions import UnsupportedFormatError

EXPORT_MIMETYPES = {
    'csv': 'text/csv',
    'json': 'application/json',
}


def _csv_value(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def rows_to_csv(rows):
    """Header from the first row's keys, one line per row, no trailing newline.

    Values containing a comma or double quote are quoted with `"` doubled.
    """
    if not rows:
        return ''

    headers = list(rows[0].keys())
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        values = [_csv_value(row.get(h)) for h in headers]
        if values == ['']:
            # csv.writer renders a lone empty field as ""
            output.write('\n')
        else:
            writer.writerow(values)

    content = output.getvalue()
    return content[:-1] if content.endswith('\n') else content


def rows_to_json(rows):
    return json.dumps(rows, indent=2, ensure_ascii=False)


def export_rows(rows, export_format):
    """Serialise rows. Returns (content, mimetype)."""
    fmt = (export_format or '').lower()
    if fmt == 'csv':
        return rows_to_csv(rows), EXPORT_MIMETYPES['csv']
    if fmt == 'json':
        return rows_to_json(rows), EXPORT_MIMETYPES['json']
    raise UnsupportedFormatError(export_format)
