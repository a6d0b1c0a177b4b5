"""
Stats Service
System statistics and the weekly complaint chart for the admin console.
All stats are computed from actual DB rows, never cached counters.
"""

import logging
from datetime import timedelta

from db_config import db_connection, utc_now
from services.complaint_config import COMPLAINT_STATUS, COMPLAINT_TYPES

logger = logging.getLogger('stats_service')


class StatsService:
    """Computes live statistics across accounts, complaints and feedback."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_system_stats(self) -> dict:
        """
        Compute the admin dashboard counters.

        Returns:
            dict with totalStudents, totalAuthorities, totalComplaints,
                  pendingComplaints, resolvedComplaints, unassignedComplaints,
                  totalFeedback, byStatus, byType
        """
        with db_connection(self.db_path) as conn:
            cursor = conn.cursor()

            def scalar(query, params=()):
                cursor.execute(query, params)
                return cursor.fetchone()[0]

            stats = {
                'totalStudents': scalar("SELECT COUNT(*) FROM students"),
                'totalAuthorities': scalar("SELECT COUNT(*) FROM authorities"),
                'totalComplaints': scalar("SELECT COUNT(*) FROM complaints"),
                'pendingComplaints': scalar("SELECT COUNT(*) FROM complaints WHERE status = 'Pending'"),
                'resolvedComplaints': scalar("SELECT COUNT(*) FROM complaints WHERE status = 'Resolved'"),
                'unassignedComplaints': scalar("SELECT COUNT(*) FROM complaints WHERE assigned_to IS NULL"),
                'totalFeedback': scalar("SELECT COUNT(*) FROM feedback"),
            }

            by_status = {status: 0 for status in COMPLAINT_STATUS}
            cursor.execute("SELECT status, COUNT(*) FROM complaints GROUP BY status")
            for status, count in cursor.fetchall():
                by_status[status] = count

            by_type = {complaint_type: 0 for complaint_type in COMPLAINT_TYPES}
            cursor.execute("SELECT type, COUNT(*) FROM complaints GROUP BY type")
            for complaint_type, count in cursor.fetchall():
                by_type[complaint_type] = count

        stats['byStatus'] = by_status
        stats['byType'] = by_type
        return stats

    def get_weekly_chart_data(self) -> list:
        """
        Daily created/resolved complaint counts for the last 7 days (UTC).

        Returns:
            List of dicts: [{date, created, resolved}, ...]
            Always returns 7 entries (filling 0s for missing days).
        """
        today = utc_now().date()
        dates = [(today - timedelta(days=i)).strftime('%Y-%m-%d') for i in range(6, -1, -1)]
        chart_data = {d: {'date': d, 'created': 0, 'resolved': 0} for d in dates}

        with db_connection(self.db_path) as conn:
            rows = conn.execute("""
                SELECT substr(created_at, 1, 10) AS day, COUNT(*)
                FROM complaints
                WHERE created_at >= ?
                GROUP BY day
            """, (dates[0],)).fetchall()
            for day, count in rows:
                if day in chart_data:
                    chart_data[day]['created'] = count

            rows = conn.execute("""
                SELECT substr(updated_at, 1, 10) AS day, COUNT(*)
                FROM complaints
                WHERE status = 'Resolved' AND updated_at >= ?
                GROUP BY day
            """, (dates[0],)).fetchall()
            for day, count in rows:
                if day in chart_data:
                    chart_data[day]['resolved'] = count

        logger.debug(f"WEEKLY_CHART | from={dates[0]} | to={dates[-1]}")
        return [chart_data[d] for d in dates]
