"""Report Executor — turns a template plus parameter values into rows.

Both execution paths (stored templates and ad-hoc custom queries) go
through the same SELECT-only gate, the same placeholder compilation and
the same read-only execution.
"""

import time
import logging
from datetime import datetime, timezone

import psycopg2

from core.utils.logging_config import log_with_context
from ..config import get_config
from ..engine import (
    compile_query, ensure_select_only, placeholder_names,
    substitute_placeholders, validate_parameters,
)
from ..exceptions import ExecutionError, NotFoundError, ValidationError
from ..repositories import ReportTemplateRepository

logger = logging.getLogger('bizdesk.reporting.executor')


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


class ReportExecutor:
    def __init__(self, template_repo=None, config=None):
        self.template_repo = template_repo or ReportTemplateRepository()
        self.config = config or get_config()

    def load_template(self, template_id):
        template = self.template_repo.get_by_id(template_id)
        if not template:
            raise NotFoundError('Report template not found')
        return template

    def prepare_parameters(self, template, parameters):
        """Apply the template's parameter schema to the supplied values."""
        if not isinstance(parameters or {}, dict):
            raise ValidationError('Parameters must be an object')
        if not self.config.ENFORCE_PARAMETER_SCHEMA:
            return dict(parameters or {})
        return validate_parameters(template.get('parameters') or {}, parameters or {})

    def execute_template(self, template_id, parameters=None):
        """Execute a stored template.

        Returns {template, parameters, query, data, rowCount, executedAt};
        `query` is the display rendering, never the executed text.
        """
        template = self.load_template(template_id)
        query_text = template.get('query_template')
        if not query_text:
            raise ValidationError('Report template has no query')

        values = self.prepare_parameters(template, parameters)
        rows = self._run(query_text, values, template_id=template['id'])

        return {
            'template': template,
            'parameters': values,
            'query': substitute_placeholders(query_text, values),
            'data': rows,
            'rowCount': len(rows),
            'executedAt': utc_now_iso(),
        }

    def execute_custom_query(self, query_text, parameters=None):
        """Execute ad-hoc query text. Returns {query, result, row_count}."""
        if not isinstance(parameters or {}, dict):
            raise ValidationError('Parameters must be an object')
        values = dict(parameters or {})
        rows = self._run(query_text, values)
        return {
            'query': substitute_placeholders(query_text, values),
            'result': rows,
            'row_count': len(rows),
        }

    def _run(self, query_text, values, template_id=None):
        ensure_select_only(query_text)
        compiled = compile_query(query_text, values)

        unbound = [name for name in placeholder_names(query_text) if name not in values]
        if unbound:
            logger.warning(f"Executing with unbound placeholders {unbound} (template={template_id})")

        started = time.monotonic()
        try:
            rows = self.template_repo.run_readonly(
                compiled.sql, compiled.params, timeout_ms=self.config.QUERY_TIMEOUT_MS)
        except psycopg2.Error as e:
            message = (str(e).strip().splitlines() or ['unknown database error'])[0]
            logger.warning(f'Report query failed (template={template_id}): {message}')
            raise ExecutionError(message)

        log_with_context(
            logger, logging.INFO, 'Report query executed',
            template_id=template_id,
            row_count=len(rows),
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return rows
