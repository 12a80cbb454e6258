"""Base Repository — eliminates connection boilerplate across all repos.

Provides query_one(), query_all(), execute() and run_readonly() that handle
get_db()/get_cursor()/release_db() and try/finally automatically.

Usage:
    class MyRepo(BaseRepository):
        def get_thing(self, id):
            return self.query_one('SELECT * FROM things WHERE id = %s', (id,))

        def save_thing(self, name):
            return self.execute(
                'INSERT INTO things (name) VALUES (%s) RETURNING id',
                (name,), returning=True
            )
"""

from database import get_db, get_cursor, release_db, dict_from_row


class BaseRepository:

    def query_one(self, sql, params=None):
        """Execute a SELECT and return a single row as dict, or None."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
            return dict_from_row(row) if row else None
        finally:
            release_db(conn)

    def query_all(self, sql, params=None):
        """Execute a SELECT and return all rows as list of dicts."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            return [dict_from_row(r) for r in cursor.fetchall()]
        finally:
            release_db(conn)

    def execute(self, sql, params=None, returning=False):
        """Execute an INSERT/UPDATE/DELETE with auto-commit.

        Args:
            sql: SQL statement
            params: Query parameters
            returning: If True, fetchone() and return dict. If False, return rowcount.

        Returns:
            dict if returning=True, else int (rowcount)
        """
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            if returning:
                result = cursor.fetchone()
                conn.commit()
                return dict_from_row(result) if result else None
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(conn)

    def run_readonly(self, sql, params=None, timeout_ms=0):
        """Run an arbitrary SELECT inside a READ ONLY transaction.

        Rows come back as plain dicts in projection order. The transaction is
        always rolled back, so nothing the statement does can persist.

        Args:
            sql: Driver-ready SQL (psycopg2 %(name)s bindings)
            params: Mapping of bound values
            timeout_ms: statement_timeout for this transaction, 0 disables it
        """
        conn = get_db()
        try:
            conn.autocommit = False
            cursor = get_cursor(conn)
            cursor.execute('SET TRANSACTION READ ONLY')
            if timeout_ms:
                cursor.execute('SET LOCAL statement_timeout = %s', (int(timeout_ms),))
            cursor.execute(sql, params if params else None)
            rows = cursor.fetchall() if cursor.description else []
            return [dict_from_row(r) for r in rows]
        finally:
            try:
                conn.rollback()
            finally:
                release_db(conn)
