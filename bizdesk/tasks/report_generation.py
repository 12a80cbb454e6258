"""
Scheduled report generation for BizDesk.

A scheduled task runs a report template with stored parameters and
archives the result as a saved report. Jobs are registered on an
APScheduler BackgroundScheduler with cron triggers.
"""

import os
import atexit
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from core.utils.logging_config import get_logger

logger = get_logger('bizdesk.tasks.report_generation')

scheduler = BackgroundScheduler(daemon=True)


def execute_report_generation(task, service=None):
    """Execute a report generation task and archive the result.

    Args:
        task: {'name', 'created_by', 'parameters': {'templateId', 'reportParameters'}}
        service: SavedReportService, built on demand when omitted

    Returns:
        {'success': True, 'message': ..., 'data': {'reportId', 'reportName'}}
    """
    from reporting.exceptions import ValidationError

    params = task.get('parameters') or {}
    template_id = params.get('templateId')
    if not template_id:
        raise ValidationError('Template ID required for report generation task')

    if service is None:
        from reporting.services import SavedReportService
        service = SavedReportService()

    timestamp = datetime.now(timezone.utc).isoformat()
    report_name = f"Scheduled Report - {task.get('name')} - {timestamp}"
    report = service.execute_and_save(
        template_id,
        params.get('reportParameters') or {},
        report_name,
        task.get('created_by'),
    )
    logger.info(f"Scheduled task '{task.get('name')}' saved report {report['id']}")
    return {
        'success': True,
        'message': 'Report generated and saved successfully',
        'data': {'reportId': report['id'], 'reportName': report['name']},
    }


def _run_scheduled(task):
    try:
        execute_report_generation(task)
    except Exception as e:
        logger.error(f"Scheduled report task '{task.get('name')}' failed: {e}")


def schedule_report_task(task, cron):
    """Register `task` to run on a crontab expression, e.g. '0 6 * * 1'.

    Returns the APScheduler job. Re-registering the same task name replaces it.
    """
    trigger = CronTrigger.from_crontab(cron)
    job = scheduler.add_job(
        _run_scheduled,
        trigger,
        args=[task],
        id=f"report_task:{task.get('name')}",
        replace_existing=True,
        misfire_grace_time=300,
        coalesce=True,
    )
    logger.info(f"Scheduled report task '{task.get('name')}' ({cron})")
    return job


def start_scheduler():
    """Start the background scheduler once per process. Skipped under TESTING."""
    if os.environ.get('TESTING'):
        logger.debug('TESTING set, report scheduler not started')
        return
    if scheduler.running:
        return

    scheduler.start()
    atexit.register(lambda: scheduler.shutdown(wait=False))
    logger.info(f"Report scheduler started (pid={os.getpid()})")
