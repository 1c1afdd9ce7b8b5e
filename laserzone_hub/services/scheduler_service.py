"""
LaserZone Hub - Background Scheduler
Publishes scheduled social posts once their time has come
Uses APScheduler for in-process job scheduling
"""
import logging
from datetime import datetime
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def init_scheduler(app):
    """Initialize the background scheduler with the Flask app context"""
    global scheduler

    if scheduler is not None:
        logger.info("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        job_defaults={
            'coalesce': True,  # Combine missed runs into one
            'max_instances': 1,  # Only one instance of each job at a time
            'misfire_grace_time': 3600  # Allow 1 hour grace for missed jobs
        }
    )

    # Store app reference for context
    scheduler.app = app

    _add_scheduled_jobs(app)

    scheduler.start()
    logger.info("Background scheduler started")

    return scheduler


def _add_scheduled_jobs(app):
    """Add all scheduled jobs"""
    interval = app.config.get('SOCIAL_PUBLISH_INTERVAL_MINUTES', 5)

    scheduler.add_job(
        func=publish_scheduled_posts,
        trigger=IntervalTrigger(minutes=interval),
        id='publish_scheduled_posts',
        name='Publish Scheduled Social Posts',
        replace_existing=True,
        kwargs={'app': app}
    )


def get_scheduler_status():
    """Get current scheduler status and job list"""
    if scheduler is None:
        return {'status': 'not_initialized', 'jobs': []}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            'id': job.id,
            'name': job.name,
            'next_run': job.next_run_time.isoformat() if job.next_run_time else None,
            'trigger': str(job.trigger)
        })

    return {
        'status': 'running' if scheduler.running else 'stopped',
        'jobs': jobs
    }


def publish_scheduled_posts(app):
    """
    Flip due posts to published
    Runs every SOCIAL_PUBLISH_INTERVAL_MINUTES for posts where:
    - status = 'scheduled'
    - scheduled_at <= now
    """
    with app.app_context():
        from laserzone_hub.services.social_service import social_service

        try:
            published = social_service.publish_due_posts(datetime.utcnow())
        except Exception as e:
            logger.error(f"Scheduled post publishing failed: {e}", exc_info=True)
            return 0

        if published:
            logger.info(f"Auto-publish run complete: {published} post(s)")
        return published
