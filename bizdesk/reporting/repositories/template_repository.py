"""Report Template Repository - Data access layer for report_templates.

Handles template CRUD, paginated listing, the saved-report reference
count used by the delete guard, and usage statistics.
"""

from psycopg2.extras import Json

from core.base_repository import BaseRepository


_SELECT_TEMPLATE = '''
    SELECT t.*, u.name AS creator_name,
           (SELECT COUNT(*) FROM saved_reports s WHERE s.template_id = t.id) AS saved_report_count
    FROM report_templates t
    LEFT JOIN users u ON u.id = t.created_by
'''


class ReportTemplateRepository(BaseRepository):
    """Repository for report template data access operations."""

    def list_templates(self, page=1, limit=10, report_type=None, search=None):
        """Paginated templates, newest first. Returns (rows, total)."""
        where = ['1=1']
        params = []
        if report_type:
            where.append('t.report_type = %s')
            params.append(report_type)
        if search:
            where.append('(t.name ILIKE %s OR t.description ILIKE %s)')
            params.extend([f'%{search}%', f'%{search}%'])

        count_row = self.query_one(
            f"SELECT COUNT(*) AS total FROM report_templates t WHERE {' AND '.join(where)}", tuple(params))
        total = count_row['total'] if count_row else 0

        params.extend([limit, (page - 1) * limit])
        rows = self.query_all(f'''
            {_SELECT_TEMPLATE}
            WHERE {' AND '.join(where)}
            ORDER BY t.created_at DESC, t.id DESC
            LIMIT %s OFFSET %s
        ''', params)
        return rows, total

    def get_by_id(self, template_id: int):
        """Get a template by ID, or None."""
        return self.query_one(f'{_SELECT_TEMPLATE} WHERE t.id = %s', (template_id,))

    def get_by_type(self, report_type: str) -> list[dict]:
        """All templates of one report type, ordered by name."""
        return self.query_all(
            f'{_SELECT_TEMPLATE} WHERE t.report_type = %s ORDER BY t.name', (report_type,))

    def get_recent_saved_reports(self, template_id: int, limit: int = 10) -> list[dict]:
        """Most recent saved reports of a template (without result payloads)."""
        return self.query_all('''
            SELECT s.id, s.name, s.parameters, s.created_by, s.created_at, s.updated_at,
                   u.name AS creator_name
            FROM saved_reports s
            LEFT JOIN users u ON u.id = s.created_by
            WHERE s.template_id = %s
            ORDER BY s.created_at DESC, s.id DESC
            LIMIT %s
        ''', (template_id, limit))

    def create(self, name: str, report_type: str, created_by: int, description: str = None,
               query_template: str = None, parameters: dict = None) -> dict:
        """Insert a template and return the stored row."""
        return self.execute('''
            INSERT INTO report_templates
                (name, description, report_type, query_template, parameters, created_by)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
        ''', (name, description, report_type, query_template, Json(parameters or {}), created_by),
            returning=True)

    def update(self, template_id: int, name: str = None, description: str = None,
               report_type: str = None, query_template: str = None, parameters: dict = None):
        """Update the provided fields. Returns the updated row, or None if unknown."""
        updates = []
        params = []

        field_map = {
            'name': name,
            'description': description,
            'report_type': report_type,
            'query_template': query_template,
            'parameters': Json(parameters) if parameters is not None else None,
        }
        for field_name, value in field_map.items():
            if value is not None:
                updates.append(f'{field_name} = %s')
                params.append(value)

        if not updates:
            return self.get_by_id(template_id)

        updates.append('updated_at = CURRENT_TIMESTAMP')
        params.append(template_id)
        return self.execute(
            f"UPDATE report_templates SET {', '.join(updates)} WHERE id = %s RETURNING *",
            params, returning=True)

    def count_saved_reports(self, template_id: int) -> int:
        row = self.query_one(
            'SELECT COUNT(*) AS total FROM saved_reports WHERE template_id = %s', (template_id,))
        return row['total'] if row else 0

    def delete(self, template_id: int) -> bool:
        """Delete a template. Returns False when the id is unknown."""
        return self.execute('DELETE FROM report_templates WHERE id = %s', (template_id,)) > 0

    def get_stats(self) -> dict:
        """Template totals, counts per type, and the five most used templates."""
        totals = self.query_one('''
            SELECT (SELECT COUNT(*) FROM report_templates) AS total_templates,
                   (SELECT COUNT(*) FROM saved_reports) AS total_saved_reports
        ''') or {}
        by_type = self.query_all('''
            SELECT report_type, COUNT(*) AS count
            FROM report_templates
            GROUP BY report_type
            ORDER BY report_type
        ''')
        most_used = self.query_all('''
            SELECT t.id, t.name, t.report_type, COUNT(s.id) AS saved_report_count
            FROM report_templates t
            LEFT JOIN saved_reports s ON s.template_id = t.id
            GROUP BY t.id
            ORDER BY saved_report_count DESC, t.name
            LIMIT 5
        ''')
        return {
            'totalTemplates': totals.get('total_templates', 0),
            'totalSavedReports': totals.get('total_saved_reports', 0),
            'byType': by_type,
            'mostUsed': most_used,
        }
