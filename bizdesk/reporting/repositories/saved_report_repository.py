"""Repository for saved_reports — persisted snapshots of template executions."""

from psycopg2.extras import Json

from core.base_repository import BaseRepository

_SELECT_REPORT = '''
    SELECT s.*, t.name AS template_name, t.report_type AS template_report_type,
           u.name AS creator_name
    FROM saved_reports s
    LEFT JOIN report_templates t ON t.id = s.template_id
    LEFT JOIN users u ON u.id = s.created_by
'''


def _nest_template(row):
    """Fold the joined template columns into a `template` sub-dict."""
    if row is None:
        return None
    row['template'] = {
        'id': row.get('template_id'),
        'name': row.pop('template_name', None),
        'report_type': row.pop('template_report_type', None),
    }
    return row


class SavedReportRepository(BaseRepository):

    # ── Reads ──

    def get_by_id(self, report_id):
        return _nest_template(self.query_one(f'{_SELECT_REPORT} WHERE s.id = %s', (report_id,)))

    def list_reports(self, page=1, limit=10, template_id=None, created_by=None, search=None):
        """Paginated saved reports, newest first. Returns (rows, total)."""
        where = ['1=1']
        params = []
        if template_id:
            where.append('s.template_id = %s')
            params.append(template_id)
        if created_by:
            where.append('s.created_by = %s')
            params.append(created_by)
        if search:
            where.append('s.name ILIKE %s')
            params.append(f'%{search}%')

        count_row = self.query_one(
            f"SELECT COUNT(*) AS total FROM saved_reports s WHERE {' AND '.join(where)}", tuple(params))
        total = count_row['total'] if count_row else 0

        params.extend([limit, (page - 1) * limit])
        rows = self.query_all(f'''
            {_SELECT_REPORT}
            WHERE {' AND '.join(where)}
            ORDER BY s.created_at DESC, s.id DESC
            LIMIT %s OFFSET %s
        ''', params)
        return [_nest_template(r) for r in rows], total

    # ── Writes ──

    def create(self, template_id, name, created_by, parameters=None, result_data=None):
        row = self.execute('''
            INSERT INTO saved_reports (template_id, name, parameters, result_data, created_by)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id
        ''', (template_id, name, Json(parameters or {}), Json(result_data or {}), created_by),
            returning=True)
        return self.get_by_id(row['id'])

    def update(self, report_id, name=None, parameters=None, result_data=None):
        """Update the provided fields. Returns the updated row, or None if unknown."""
        updates = []
        params = []
        if name is not None:
            updates.append('name = %s')
            params.append(name)
        if parameters is not None:
            updates.append('parameters = %s')
            params.append(Json(parameters))
        if result_data is not None:
            updates.append('result_data = %s')
            params.append(Json(result_data))

        if not updates:
            return self.get_by_id(report_id)

        updates.append('updated_at = CURRENT_TIMESTAMP')
        params.append(report_id)
        if self.execute(f"UPDATE saved_reports SET {', '.join(updates)} WHERE id = %s", params) == 0:
            return None
        return self.get_by_id(report_id)

    def delete(self, report_id) -> bool:
        return self.execute('DELETE FROM saved_reports WHERE id = %s', (report_id,)) > 0

    # ── Stats ──

    def get_stats(self):
        totals = self.query_one('''
            SELECT COUNT(*) AS total_reports,
                   COUNT(*) FILTER (WHERE created_at >= date_trunc('month', CURRENT_DATE)) AS this_month
            FROM saved_reports
        ''') or {}
        top_templates = self.query_all('''
            SELECT template_id, COUNT(*) AS count
            FROM saved_reports
            GROUP BY template_id
            ORDER BY count DESC, template_id
            LIMIT 5
        ''')
        top_users = self.query_all('''
            SELECT created_by, COUNT(*) AS count
            FROM saved_reports
            GROUP BY created_by
            ORDER BY count DESC, created_by
            LIMIT 5
        ''')
        return {
            'totalReports': totals.get('total_reports', 0),
            'reportsThisMonth': totals.get('this_month', 0),
            'topTemplates': top_templates,
            'topUsers': top_users,
        }
